"""
Run one of the bundled tools through clipfetch's process invoker.

Usage:
  uv run examples/run_tool.py ./yt-dlp --version
  uv run examples/run_tool.py ./ffmpeg/ffmpeg -hide_banner -formats
"""
import argparse
import sys

from clipfetch import SpawnError, invoke
from clipfetch.logging_config import setup_logging


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("executable", help="Path to the tool")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments passed through unchanged")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    setup_logging(level="DEBUG" if args.debug else "WARNING")

    try:
        result = invoke(args.executable, args.args)
    except SpawnError as e:
        print(e, file=sys.stderr)
        sys.exit(127)

    sys.stdout.write(result.stdout_text)
    sys.stderr.write(result.stderr_text)
    print(f"exit code: {result.returncode}", file=sys.stderr)
    sys.exit(result.returncode)


if __name__ == "__main__":
    main()
