from pathlib import Path

import pytest

from clipfetch import downloader
from clipfetch.errors import DownloadError, SpawnError
from clipfetch.models import InvocationResult, ToolPaths
from clipfetch.utils import USER_AGENT

TOOLS = ToolPaths(yt_dlp=Path("/bin/yt-dlp"), ffmpeg=Path("/bin/ffmpeg"))
URL = "https://www.youtube.com/watch?v=abc123"


def result(code=0, stderr=b""):
    return InvocationResult(args=("yt-dlp",), returncode=code, stdout=b"", stderr=stderr)


def test_build_download_args_layout():
    args = downloader.build_download_args(URL, Path("out"), Path("/bin/ffmpeg"))

    assert args[-1] == URL
    assert args[:2] == ["-f", "bestvideo[height=720]+bestaudio/best[height=720]"]
    assert "-c" in args
    assert args[args.index("--merge-output-format") + 1] == "mp4"
    assert args[args.index("-o") + 1] == str(Path("out") / "%(title)s.%(ext)s")
    assert args[args.index("--ffmpeg-location") + 1] == str(Path("/bin/ffmpeg"))
    assert args[args.index("--user-agent") + 1] == USER_AGENT
    assert "--newline" in args
    headers = [args[i + 1] for i, a in enumerate(args) if a == "--add-header"]
    assert "Accept-Language: en-US,en;q=0.5" in headers
    assert len(headers) == 5


def test_build_download_args_custom_format():
    args = downloader.build_download_args(URL, "out", "ffmpeg", format_selector="best")
    assert args[:2] == ["-f", "best"]


@pytest.mark.parametrize("line, expected", [
    ("[download]  42.5% of 10.00MiB at 1.00MiB/s ETA 00:05", 42.5),
    ("[download] 100% of 10.00MiB in 00:10", 100.0),
    ("[download] Destination: out/video.mp4", None),
    ("[Merger] Merging formats into \"out/video.mp4\"", None),
])
def test_parse_progress(line, expected):
    assert downloader.parse_progress(line) == expected


def test_download_video_success_streams_through_invoke(monkeypatch):
    calls = []

    def fake_invoke(path, args, on_line=None):
        calls.append((path, args))
        on_line("stdout", "[download]  50.0% of 1MiB")
        on_line("stdout", "[download] Destination: out/x.mp4")
        return result(0)

    monkeypatch.setattr(downloader, "invoke", fake_invoke)
    res = downloader.download_video(URL, TOOLS, "out", show_progress=False)

    assert res.ok
    assert calls[0][0] == TOOLS.yt_dlp
    assert calls[0][1][-1] == URL


def test_download_video_nonzero_exit_raises(monkeypatch):
    monkeypatch.setattr(
        downloader, "invoke", lambda path, args, on_line=None: result(1, b"ERROR: Video unavailable\n")
    )
    with pytest.raises(DownloadError) as exc_info:
        downloader.download_video(URL, TOOLS, "out", show_progress=False)
    assert exc_info.value.result.returncode == 1
    assert exc_info.value.url == URL


def test_robust_retries_until_success(monkeypatch):
    outcomes = [result(1), result(1), result(0)]
    sleeps = []
    monkeypatch.setattr(downloader, "invoke", lambda path, args, on_line=None: outcomes.pop(0))
    monkeypatch.setattr(downloader.time, "sleep", sleeps.append)

    res = downloader.download_video_robust(URL, TOOLS, "out", retry_delay=7, show_progress=False)

    assert res.ok
    assert sleeps == [7, 7]
    assert outcomes == []


def test_robust_gives_up_after_max_attempts(monkeypatch):
    attempts = []

    def always_fail(path, args, on_line=None):
        attempts.append(1)
        return result(2)

    monkeypatch.setattr(downloader, "invoke", always_fail)
    monkeypatch.setattr(downloader.time, "sleep", lambda s: None)

    with pytest.raises(DownloadError):
        downloader.download_video_robust(
            URL, TOOLS, "out", retry_delay=0, max_attempts=3, show_progress=False
        )
    assert len(attempts) == 3


def test_robust_does_not_retry_spawn_errors(monkeypatch):
    attempts = []

    def cannot_start(path, args, on_line=None):
        attempts.append(1)
        raise SpawnError(path, FileNotFoundError(2, "No such file or directory"))

    monkeypatch.setattr(downloader, "invoke", cannot_start)
    with pytest.raises(SpawnError):
        downloader.download_video_robust(URL, TOOLS, "out", retry_delay=0, show_progress=False)
    assert len(attempts) == 1
