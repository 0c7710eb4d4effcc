from pathlib import Path

import pytest

from clipfetch import cli
from clipfetch.errors import DownloadError, ToolNotFoundError
from clipfetch.models import InvocationResult, ToolPaths

TOOLS = ToolPaths(yt_dlp=Path("/bin/yt-dlp"), ffmpeg=Path("/bin/ffmpeg"))


@pytest.fixture
def quiet_cli(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in ("CLIPFETCH_OUTPUT_DIR", "CLIPFETCH_RETRY_DELAY", "CLIPFETCH_MAX_ATTEMPTS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(cli, "setup_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "resolve_tools", lambda settings: TOOLS)
    downloads = []

    def fake_download(url, tools, output_dir, **kwargs):
        downloads.append((url, output_dir, kwargs))

    monkeypatch.setattr(cli, "download_video_robust", fake_download)
    return downloads


def test_parse_args_defaults():
    args = cli.parse_args([])
    assert args.urls == []
    assert not args.non_interactive
    assert not args.update
    assert args.retry_delay is None


def test_batch_mode_downloads_valid_urls_and_skips_invalid(quiet_cli, tmp_path):
    code = cli.run(["https://example.com/v/1", "not a url", "https://example.com/v/2", "-o", "vids"])

    assert code == 0
    assert [d[0] for d in quiet_cli] == ["https://example.com/v/1", "https://example.com/v/2"]
    assert (tmp_path / "vids").is_dir()


def test_cli_flags_reach_downloader(quiet_cli):
    cli.run(["https://example.com/v/1", "--retry-delay", "3", "--max-attempts", "2", "--format", "best"])
    _, output_dir, kwargs = quiet_cli[0]
    assert output_dir == Path("downloaded_videos")
    assert kwargs == {"retry_delay": 3.0, "max_attempts": 2, "format_selector": "best"}


def test_non_interactive_without_urls_fails(quiet_cli):
    assert cli.run(["--non-interactive"]) == 1
    assert quiet_cli == []


def test_missing_tool_exits_nonzero(quiet_cli, monkeypatch):
    def missing(settings):
        raise ToolNotFoundError("yt-dlp", "yt-dlp")

    monkeypatch.setattr(cli, "resolve_tools", missing)
    assert cli.run(["https://example.com/v/1"]) == 1


def test_download_failure_exits_nonzero(quiet_cli, monkeypatch):
    def fail(url, tools, output_dir, **kwargs):
        raise DownloadError(url, InvocationResult(("yt-dlp",), 1, b"", b""))

    monkeypatch.setattr(cli, "download_video_robust", fail)
    assert cli.run(["https://example.com/v/1", "--max-attempts", "1"]) == 1


def test_invalid_config_exits_nonzero(quiet_cli):
    assert cli.run(["https://example.com/v/1", "--retry-delay", "-5"]) == 1


def test_update_flag_runs_updaters(quiet_cli, monkeypatch):
    updated = []
    monkeypatch.setattr(cli, "update_yt_dlp", lambda path: updated.append(("yt-dlp", path)))
    monkeypatch.setattr(cli, "update_ffmpeg", lambda path: updated.append(("ffmpeg", path)))
    cli.run(["--update", "https://example.com/v/1"])
    assert updated == [("yt-dlp", TOOLS.yt_dlp), ("ffmpeg", TOOLS.ffmpeg)]


def test_interactive_mode(quiet_cli, monkeypatch):
    answers = iter(["not a url", "https://example.com/v/1", "https://example.com/v/2"])
    monkeypatch.setattr(cli.Prompt, "ask", lambda *a, **k: next(answers))
    again = iter([True, False])
    monkeypatch.setattr(cli.Confirm, "ask", lambda *a, **k: next(again))

    assert cli.run([]) == 0
    assert [d[0] for d in quiet_cli] == ["https://example.com/v/1", "https://example.com/v/2"]


def test_interactive_exit_word(quiet_cli, monkeypatch):
    monkeypatch.setattr(cli.Prompt, "ask", lambda *a, **k: "EXIT")
    assert cli.run([]) == 0
    assert quiet_cli == []


def test_interactive_stops_on_eof(quiet_cli, monkeypatch):
    def eof(*a, **k):
        raise EOFError

    monkeypatch.setattr(cli.Prompt, "ask", eof)
    assert cli.run([]) == 0
