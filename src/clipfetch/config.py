"""
Runtime settings.

Values come from (highest first) CLI flags, environment variables prefixed
with ``CLIPFETCH_`` (a ``.env`` file in the working directory is loaded into
the environment first), and the defaults below.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from .tools import DEFAULT_FFMPEG_PATH, DEFAULT_YT_DLP_PATH

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLIPFETCH_"

DEFAULT_FORMAT = "bestvideo[height=720]+bestaudio/best[height=720]"


class Settings(BaseModel):
    yt_dlp_path: Path = DEFAULT_YT_DLP_PATH
    ffmpeg_path: Path = DEFAULT_FFMPEG_PATH
    output_dir: Path = Path("downloaded_videos")
    retry_delay: float = Field(default=10.0, ge=0)
    max_attempts: int | None = Field(default=None, ge=1)  # None retries forever
    format_selector: str = DEFAULT_FORMAT

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        use_dotenv: bool = True,
        **overrides: Any,
    ) -> "Settings":
        if use_dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        env = os.environ if environ is None else environ

        values: dict[str, Any] = {}
        for field_name in cls.model_fields:
            raw = env.get(ENV_PREFIX + field_name.upper())
            if raw:
                values[field_name] = raw
                logger.debug(f"{field_name} set from environment")

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
