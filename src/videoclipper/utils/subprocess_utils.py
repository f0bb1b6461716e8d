"""Supervised subprocess runner for external tools (ffmpeg, ImageMagick, G'MIC)."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Sequence

from ..core.errors import PipelineCancelled, ToolFailureError
from .interrupt import CancelToken

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1
TERMINATE_GRACE = 5.0
STDERR_TAIL = 500


def run_command(
    cmd: Sequence[str | Path],
    stage: str,
    cancel: CancelToken | None = None,
    poll_interval: float = POLL_INTERVAL,
    on_tick: Callable[[], None] | None = None,
    capture: bool = False,
    cwd: Path | None = None,
) -> subprocess.CompletedProcess:
    """Run an external command, polling for completion and cancellation.

    stdout/stderr go to temporary files so a chatty tool never blocks on a
    full pipe. ``on_tick`` is called between polls. On cancellation the
    child is terminated (then killed) and PipelineCancelled is raised; a
    non-zero exit raises ToolFailureError. With ``capture`` the returned
    CompletedProcess carries decoded stdout.
    """
    cmd = [str(c) for c in cmd]
    cmd_str = " ".join(cmd)
    tool = Path(cmd[0]).name
    if cancel is not None and cancel.is_cancelled():
        raise PipelineCancelled(stage)
    logger.debug(f"Running: {cmd_str}")

    with tempfile.TemporaryFile() as out, tempfile.TemporaryFile() as err:
        try:
            proc = subprocess.Popen(
                cmd, cwd=cwd, stdin=subprocess.DEVNULL, stdout=out, stderr=err
            )
        except OSError as e:
            raise ToolFailureError(tool, stage, None, str(e)) from e

        try:
            while True:
                try:
                    returncode = proc.wait(timeout=poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    pass
                if cancel is not None and cancel.is_cancelled():
                    logger.debug(f"Cancelling {tool} during '{stage}'")
                    raise PipelineCancelled(stage)
                if on_tick is not None:
                    on_tick()
        finally:
            if proc.poll() is None:
                _stop(proc)

        out.seek(0)
        err.seek(0)
        stdout = out.read().decode("utf-8", errors="replace")
        stderr = err.read().decode("utf-8", errors="replace")

    if stdout:
        logger.log(5, f"stdout: {stdout[-STDERR_TAIL:]}")
    if stderr:
        logger.debug(f"stderr: {stderr[-STDERR_TAIL:]}")

    if returncode != 0:
        # a terminal Ctrl-C reaches the child too
        if cancel is not None and cancel.is_cancelled():
            raise PipelineCancelled(stage)
        raise ToolFailureError(tool, stage, returncode, stderr[-STDERR_TAIL:])

    return subprocess.CompletedProcess(
        cmd, returncode, stdout if capture else None, stderr if capture else None
    )


def _stop(proc: subprocess.Popen) -> None:
    """Terminate, then kill after a grace period; always reap."""
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        logger.warning(f"Process {proc.pid} ignored terminate, killing it")
        proc.kill()
        proc.wait()
