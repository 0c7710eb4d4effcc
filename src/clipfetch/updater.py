"""
Self-update for the bundled yt-dlp and ffmpeg binaries.

yt-dlp updates itself (``yt-dlp -U``); ffmpeg is replaced with the binary
from the latest BtbN/FFmpeg-Builds release. Every failure here is logged and
reported as "not updated": a failed update never stops a download run.
"""

import io
import logging
import os
import re
import stat
import sys
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Any

import requests

from .invoker import invoke
from .utils import GITHUB_API_HEADERS, executable_name

logger = logging.getLogger(__name__)

YT_DLP_REPO = "yt-dlp/yt-dlp"
FFMPEG_REPO = "BtbN/FFmpeg-Builds"
GITHUB_LATEST_RELEASE = "https://api.github.com/repos/{repo}/releases/latest"

VERSION_RE = re.compile(r"^\s*(\d{4})\.(\d{1,2})\.(\d{1,2})")

# platform -> (required substring, archive suffix)
FFMPEG_ASSETS = {
    "win32": ("win64", ".zip"),
    "linux": ("linux64", ".tar.xz"),
}


# ────────────────────────────────
# Version Helpers
# ────────────────────────────────


def parse_version(s: str) -> tuple[int, int, int] | None:
    """Parse a ``YYYY.MM.DD`` version string."""
    m = VERSION_RE.match(s)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def needs_update(current: str, latest: str) -> bool:
    current_parsed, latest_parsed = parse_version(current), parse_version(latest)
    if current_parsed and latest_parsed:
        return current_parsed < latest_parsed
    return current.strip() != latest.strip()


# ────────────────────────────────
# GitHub Releases
# ────────────────────────────────


def fetch_latest_release(repo: str, timeout: float = 30.0) -> dict[str, Any] | None:
    url = GITHUB_LATEST_RELEASE.format(repo=repo)
    try:
        resp = requests.get(url, headers=GITHUB_API_HEADERS, timeout=timeout)
    except requests.RequestException as e:
        logger.warning(f"Failed to reach GitHub for {repo}: {e}")
        return None
    if not resp.ok:
        logger.warning(
            f"Failed to fetch the latest {repo} release info. HTTP Status: {resp.status_code}"
        )
        return None
    try:
        return resp.json()
    except ValueError as e:
        logger.warning(f"Release info for {repo} is not valid JSON: {e}")
        return None


def select_ffmpeg_asset(
    assets: list[dict[str, Any]], platform: str | None = None
) -> tuple[str, str] | None:
    """Return (name, download_url) of the static build for ``platform``."""
    platform = platform or sys.platform
    wanted = FFMPEG_ASSETS.get(platform)
    if wanted is None:
        logger.warning(f"No ffmpeg builds published for platform {platform}")
        return None
    marker, suffix = wanted
    for asset in assets:
        name = (asset.get("name") or "").lower()
        if marker in name and name.endswith(suffix) and "shared" not in name:
            return asset["name"], asset["browser_download_url"]
    return None


def extract_ffmpeg(archive: bytes, archive_name: str, binary_name: str) -> bytes | None:
    """Pull the ffmpeg binary out of a release archive (.zip or .tar.xz)."""
    binary_name = binary_name.lower()
    if archive_name.lower().endswith(".zip"):
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            for name in zf.namelist():
                if Path(name).name.lower() == binary_name:
                    return zf.read(name)
        return None

    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as tf:
        for member in tf.getmembers():
            if member.isfile() and Path(member.name).name.lower() == binary_name:
                f = tf.extractfile(member)
                if f is not None:
                    return f.read()
    return None


def _replace_binary(target: Path, data: bytes) -> None:
    # Written beside the target and renamed over it, so a failed write leaves the old binary intact.
    tmp = tempfile.NamedTemporaryFile(dir=target.parent, prefix=".ffmpeg-", delete=False)
    tmp_path = Path(tmp.name)
    try:
        with tmp:
            tmp.write(data)
        tmp_path.chmod(tmp_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        os.replace(tmp_path, target)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


# ────────────────────────────────
# Updaters
# ────────────────────────────────


def update_yt_dlp(yt_dlp_path: str | os.PathLike) -> bool:
    logger.info("Checking for yt-dlp updates...")
    result = invoke(yt_dlp_path, ["--version"])
    if not result.ok:
        logger.warning("Failed to retrieve current yt-dlp version.")
        return False
    current = result.stdout_text.strip()
    logger.info(f"Current yt-dlp version: {current}")

    release = fetch_latest_release(YT_DLP_REPO)
    if release is None:
        return False
    latest = (release.get("tag_name") or "").strip()
    if not latest:
        logger.warning("Could not parse the latest yt-dlp version info.")
        return False
    logger.info(f"Latest yt-dlp version: {latest}")

    if not needs_update(current, latest):
        logger.info("The current yt-dlp is up-to-date.")
        return False

    logger.info("A newer yt-dlp version is available. Updating yt-dlp...")
    update = invoke(yt_dlp_path, ["-U"])
    if not update.ok:
        logger.error(f"yt-dlp update failed: {update.stderr_text.strip()}")
        return False
    logger.info("yt-dlp updated successfully.")
    return True


def update_ffmpeg(ffmpeg_path: str | os.PathLike) -> bool:
    logger.info("Checking for ffmpeg updates...")
    result = invoke(ffmpeg_path, ["-version"])
    if not result.ok:
        logger.warning("Failed to retrieve current ffmpeg version.")
        return False
    # "ffmpeg version N-113000-g... Copyright (c) ..."
    first_line = (result.stdout_text.splitlines() or [""])[0]
    tokens = first_line.split()
    current = tokens[2] if len(tokens) > 2 else ""
    logger.info(f"Current ffmpeg version: {current}")

    release = fetch_latest_release(FFMPEG_REPO)
    if release is None:
        return False
    tag_name = (release.get("tag_name") or "").strip()
    if not tag_name:
        logger.warning("Could not parse the latest ffmpeg version info.")
        return False
    logger.info(f"Latest ffmpeg version: {tag_name}")

    if current == tag_name:
        logger.info("The current ffmpeg is up-to-date.")
        return False

    asset = select_ffmpeg_asset(release.get("assets") or [])
    if asset is None:
        logger.warning("Could not find a suitable ffmpeg update asset for this platform.")
        return False
    asset_name, download_url = asset

    logger.info(f"Downloading ffmpeg update from {download_url}")
    try:
        resp = requests.get(download_url, timeout=300)
    except requests.RequestException as e:
        logger.error(f"Failed to download ffmpeg update: {e}")
        return False
    if not resp.ok:
        logger.error(f"Failed to download ffmpeg update. HTTP Status: {resp.status_code}")
        return False

    binary = extract_ffmpeg(resp.content, asset_name, executable_name("ffmpeg"))
    if binary is None:
        logger.warning(f"ffmpeg binary not found in {asset_name}.")
        return False

    target = Path(ffmpeg_path)
    try:
        _replace_binary(target, binary)
    except OSError as e:
        logger.error(f"Failed to install ffmpeg update at {target}: {e}")
        return False
    logger.info(f"ffmpeg updated successfully ({len(binary)} bytes written to {target}).")
    return True
