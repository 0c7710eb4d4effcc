"""Locate the yt-dlp and ffmpeg executables."""

import logging
import os
import shutil
from pathlib import Path

from .errors import ToolNotFoundError
from .models import ToolPaths
from .utils import executable_name

logger = logging.getLogger(__name__)

YT_DLP = "yt-dlp"
FFMPEG = "ffmpeg"

DEFAULT_YT_DLP_PATH = Path(executable_name(YT_DLP))
DEFAULT_FFMPEG_PATH = Path("ffmpeg") / executable_name(FFMPEG)


def resolve_tool(configured: str | os.PathLike, name: str, search_path: bool = True) -> Path:
    """
    Bundled binary first, then the OS search path (only if ``search_path``).

    A relative ``configured`` path is taken relative to the working
    directory. The returned path is absolute so the OS never re-searches
    PATH for it at spawn time.
    """
    path = Path(configured)
    if path.is_file():
        resolved = path.absolute()
        logger.debug(f"Using {name} at {resolved}")
        return resolved

    found = shutil.which(name) if search_path else None
    if found:
        logger.warning(f"{name} not found at {path}, using {found} from PATH")
        return Path(found)

    raise ToolNotFoundError(name, path)


def resolve_tools(settings) -> ToolPaths:
    # An explicitly configured path must exist; PATH lookup only replaces the defaults.
    return ToolPaths(
        yt_dlp=resolve_tool(
            settings.yt_dlp_path, YT_DLP,
            search_path=Path(settings.yt_dlp_path) == DEFAULT_YT_DLP_PATH,
        ),
        ffmpeg=resolve_tool(
            settings.ffmpeg_path, FFMPEG,
            search_path=Path(settings.ffmpeg_path) == DEFAULT_FFMPEG_PATH,
        ),
    )
