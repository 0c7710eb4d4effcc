from .errors import ClipfetchError, DownloadError, SpawnError, ToolNotFoundError
from .invoker import invoke
from .models import InvocationResult, ToolPaths

__all__ = [
    "invoke",
    "InvocationResult",
    "ToolPaths",
    "ClipfetchError",
    "SpawnError",
    "DownloadError",
    "ToolNotFoundError",
]

__version__ = "0.1.0"
