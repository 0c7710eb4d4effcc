"""
Process invocation for the external tools (yt-dlp, ffmpeg).

Every child process clipfetch starts goes through :func:`invoke`. The child
is executed directly, never through a shell, so each argument reaches it as
one argv token. Its stdin is the null device.
"""

import logging
import os
import shlex
import subprocess
import threading
from collections.abc import Callable, Sequence

from .errors import SpawnError
from .models import InvocationResult

logger = logging.getLogger(__name__)

# Called as on_line(stream_name, line) with stream_name "stdout" or "stderr".
LineCallback = Callable[[str, str], None]


def _spawn(command: list[str]) -> subprocess.Popen:
    try:
        return subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        logger.debug(f"Spawn failed for {command[0]}: {e}")
        raise SpawnError(command[0], e) from e


def _pump(stream, name: str, chunks: list[bytes], on_line: LineCallback, errors: list) -> None:
    # Keeps reading after a callback failure so the child never blocks on a full pipe.
    with stream:
        for raw in iter(stream.readline, b""):
            chunks.append(raw)
            if errors:
                continue
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            try:
                on_line(name, line)
            except Exception as e:
                errors.append(e)


def _communicate_streaming(proc: subprocess.Popen, on_line: LineCallback) -> tuple[bytes, bytes]:
    out_chunks: list[bytes] = []
    err_chunks: list[bytes] = []
    errors: list[Exception] = []
    readers = [
        threading.Thread(
            target=_pump, args=(proc.stdout, "stdout", out_chunks, on_line, errors), daemon=True
        ),
        threading.Thread(
            target=_pump, args=(proc.stderr, "stderr", err_chunks, on_line, errors), daemon=True
        ),
    ]
    for t in readers:
        t.start()
    proc.wait()
    for t in readers:
        t.join()
    if errors:
        raise errors[0]
    return b"".join(out_chunks), b"".join(err_chunks)


def invoke(
    executable_path: str | os.PathLike,
    arguments: Sequence[str] = (),
    on_line: LineCallback | None = None,
) -> InvocationResult:
    """
    Run ``executable_path`` with ``arguments`` and block until it exits.

    Returns the exit code together with everything the child wrote to
    stdout and stderr, whatever the exit code is. Raises SpawnError only
    when the process could not be started at all.

    If ``on_line`` is given it is called for each output line as it
    arrives; the returned result still holds the exact bytes.
    """
    command = [os.fspath(executable_path), *arguments]
    logger.debug(f"Running command: {shlex.join(command)}")

    proc = _spawn(command)
    with proc:
        if on_line is None:
            stdout, stderr = proc.communicate()
        else:
            stdout, stderr = _communicate_streaming(proc, on_line)

    logger.debug(f"{command[0]} exited with code {proc.returncode}")
    return InvocationResult(
        args=tuple(command),
        returncode=proc.returncode,
        stdout=stdout,
        stderr=stderr,
    )
