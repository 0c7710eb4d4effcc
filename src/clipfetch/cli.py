#!/usr/bin/env python3
# cli.py: command-line entry point for clipfetch

import argparse
import logging
import sys

from pydantic import ValidationError
from rich.prompt import Confirm, Prompt

from clipfetch.config import Settings
from clipfetch.downloader import download_video_robust
from clipfetch.errors import ClipfetchError
from clipfetch.logging_config import setup_logging
from clipfetch.models import ToolPaths
from clipfetch.tools import resolve_tools
from clipfetch.updater import update_ffmpeg, update_yt_dlp
from clipfetch.utils import is_valid_url

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="clipfetch",
        description="Download videos with yt-dlp and merge them to MP4 with ffmpeg",
    )

    parser.add_argument(
        "urls",
        nargs="*",
        help="Video URLs to download (switches to non-interactive mode)",
    )

    # Tools
    parser.add_argument(
        "--yt-dlp-path",
        default=None,
        help="Path to the yt-dlp binary (default: ./yt-dlp)",
    )
    parser.add_argument(
        "--ffmpeg-path",
        default=None,
        help="Path to the ffmpeg binary (default: ./ffmpeg/ffmpeg)",
    )
    parser.add_argument(
        "--update",
        action="store_true",
        help="Check for yt-dlp and ffmpeg updates on startup",
    )

    # Download
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output directory for downloaded videos (default: downloaded_videos)",
    )
    parser.add_argument(
        "--format",
        dest="format_selector",
        default=None,
        help="yt-dlp format selector",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Run without prompting (requires at least one URL)",
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        default=None,
        help="Seconds to wait before retrying a failed download (default: 10)",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Give up after this many attempts per URL (default: retry forever)",
    )

    # Logging
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to (e.g., clipfetch.log)",
    )

    return parser.parse_args(argv)


def _download(url: str, tools: ToolPaths, settings: Settings) -> None:
    download_video_robust(
        url,
        tools,
        settings.output_dir,
        retry_delay=settings.retry_delay,
        max_attempts=settings.max_attempts,
        format_selector=settings.format_selector,
    )


def run_batch(urls: list[str], tools: ToolPaths, settings: Settings) -> int:
    if not urls:
        logger.error("Non-interactive mode requires at least one URL.")
        return 1
    for url in urls:
        if not is_valid_url(url):
            logger.error(f"Invalid URL: {url}")
            continue
        _download(url, tools, settings)
    return 0


def run_interactive(tools: ToolPaths, settings: Settings) -> int:
    while True:
        try:
            url = Prompt.ask("Enter the video URL (or type 'exit' to quit)").strip()
        except EOFError:
            break
        if url.lower() == "exit":
            break
        if not is_valid_url(url):
            logger.error("Invalid URL. Please enter a valid video link.")
            continue
        _download(url, tools, settings)
        try:
            again = Confirm.ask("Do you want to download another video?", default=False)
        except EOFError:
            break
        if not again:
            break
    return 0


def run(argv=None) -> int:
    args = parse_args(argv)

    log_level = "DEBUG" if args.debug else "INFO"
    setup_logging(level=log_level, log_file=args.log_file)

    try:
        settings = Settings.from_env(
            yt_dlp_path=args.yt_dlp_path,
            ffmpeg_path=args.ffmpeg_path,
            output_dir=args.output,
            retry_delay=args.retry_delay,
            max_attempts=args.max_attempts,
            format_selector=args.format_selector,
        )
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if not settings.output_dir.exists():
        settings.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created output directory at {settings.output_dir}")

    try:
        tools = resolve_tools(settings)
        if args.update:
            update_yt_dlp(tools.yt_dlp)
            update_ffmpeg(tools.ffmpeg)

        if args.non_interactive or args.urls:
            return run_batch(args.urls, tools, settings)
        return run_interactive(tools, settings)
    except ClipfetchError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return 130


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
