import os


class ClipfetchError(Exception):
    """Base class for every error clipfetch raises on purpose."""


class SpawnError(ClipfetchError):
    """The OS refused to start a child process (missing file, no permission, bad binary)."""

    def __init__(self, executable: str | os.PathLike, cause: OSError):
        self.executable = os.fspath(executable)
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f"Failed to start {self.executable}: {reason}")


class ToolNotFoundError(ClipfetchError):
    def __init__(self, name: str, configured: str | os.PathLike):
        self.name = name
        self.configured = os.fspath(configured)
        super().__init__(
            f"{name} not found at {self.configured} and not available on PATH"
        )


class DownloadError(ClipfetchError):
    """yt-dlp ran but exited with a nonzero status."""

    def __init__(self, url: str, result):
        self.url = url
        self.result = result
        super().__init__(
            f"yt-dlp failed for {url} with exit code {result.returncode}"
        )
