from clipfetch.cli import main

main()
