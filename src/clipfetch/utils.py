import logging
import sys
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# ────────────────────────────────
# Platform Helpers
# ────────────────────────────────


def executable_name(name: str) -> str:
    """Append the platform executable suffix (``.exe`` on Windows)."""
    if sys.platform == "win32":
        return f"{name}.exe"
    return name


# ────────────────────────────────
# URL Validation
# ────────────────────────────────


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        logger.debug(f"Unparseable URL: {url!r}")
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# ────────────────────────────────
# Request Headers (passed to yt-dlp)
# ────────────────────────────────

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:91.0) Gecko/20100101 Firefox/91.0"

BROWSER_HEADERS = [
    (
        "Accept",
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    ),
    ("Accept-Language", "en-US,en;q=0.5"),
    ("Accept-Encoding", "gzip, deflate, br"),
    ("Connection", "keep-alive"),
    ("Upgrade-Insecure-Requests", "1"),
]

GITHUB_API_HEADERS = {
    "User-Agent": "clipfetch",
    "Accept": "application/vnd.github.v3+json",
}
