import logging
import os
import re
import time
from pathlib import Path

from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

from .config import DEFAULT_FORMAT
from .errors import DownloadError
from .invoker import invoke
from .models import InvocationResult, ToolPaths
from .utils import BROWSER_HEADERS, USER_AGENT

logger = logging.getLogger(__name__)

PROGRESS_RE = re.compile(r"\[download\]\s+(\d+(?:\.\d+)?)%")


def build_download_args(
    url: str,
    output_dir: str | os.PathLike,
    ffmpeg_path: str | os.PathLike,
    format_selector: str = DEFAULT_FORMAT,
) -> list[str]:
    """yt-dlp arguments: resume partial downloads and merge into MP4. The URL goes last."""
    output_template = str(Path(output_dir) / "%(title)s.%(ext)s")
    args = [
        "-f", format_selector,
        "-c",
        "--merge-output-format", "mp4",
        "-o", output_template,
        "--ffmpeg-location", os.fspath(ffmpeg_path),
        "--user-agent", USER_AGENT,
        "--newline",
    ]
    for key, value in BROWSER_HEADERS:
        args += ["--add-header", f"{key}: {value}"]
    args.append(url)
    return args


def parse_progress(line: str) -> float | None:
    m = PROGRESS_RE.search(line)
    if not m:
        return None
    return float(m.group(1))


def download_video(
    url: str,
    tools: ToolPaths,
    output_dir: str | os.PathLike,
    format_selector: str = DEFAULT_FORMAT,
    show_progress: bool = True,
) -> InvocationResult:
    """Download one URL with yt-dlp. Raises DownloadError if yt-dlp exits nonzero."""
    args = build_download_args(url, output_dir, tools.ffmpeg, format_selector)
    logger.info(f"Downloading video from: {url}")

    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        disable=not show_progress,
    )
    with progress:
        task_id = progress.add_task("[cyan]Downloading...", total=100)

        def on_line(stream: str, line: str) -> None:
            percent = parse_progress(line)
            if percent is not None:
                progress.update(task_id, completed=percent)
            elif line:
                logger.debug(f"[yt-dlp:{stream}] {line}")

        result = invoke(tools.yt_dlp, args, on_line=on_line)

    if not result.ok:
        tail = result.stderr_text.strip().splitlines()[-1:] or ["(no stderr)"]
        logger.error(f"yt-dlp failed with exit code {result.returncode}: {tail[0]}")
        raise DownloadError(url, result)

    logger.info(f"Download complete! Saved to {output_dir}")
    return result


def download_video_robust(
    url: str,
    tools: ToolPaths,
    output_dir: str | os.PathLike,
    retry_delay: float = 10.0,
    max_attempts: int | None = None,
    **kwargs,
) -> InvocationResult:
    """
    Keep retrying a failed download, sleeping ``retry_delay`` seconds between
    attempts. yt-dlp resumes from the partial file on each retry.

    With ``max_attempts=None`` it never gives up. SpawnError is not retried.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            result = download_video(url, tools, output_dir, **kwargs)
        except DownloadError as e:
            if max_attempts is not None and attempt >= max_attempts:
                logger.error(f"Giving up on {url} after {attempt} attempts")
                raise
            logger.error(f"Download encountered an error: {e}. Retrying in {retry_delay} seconds...")
            time.sleep(retry_delay)
            logger.info("Resuming download...")
            continue

        logger.info("Download completed successfully.")
        return result
