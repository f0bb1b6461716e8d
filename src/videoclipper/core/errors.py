"""Error taxonomy shared by every mode.

All failures raised by the library derive from ``VideoClipperError`` so the
CLI can print a single line and exit non-zero without masking programming
errors.
"""

from __future__ import annotations

from pathlib import Path


class VideoClipperError(Exception):
    """Base class for every expected failure of a run."""


# ── Filename index ───────────────────────────────────────────────────

class InvalidFilenameError(VideoClipperError):
    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid filename {str(self.path)!r}: {reason}")


class DuplicateIdentifierError(VideoClipperError):
    def __init__(self, identifier: int, path_a: Path, path_b: Path):
        self.identifier = identifier
        self.path_a = Path(path_a)
        self.path_b = Path(path_b)
        super().__init__(
            f"Duplicate numerical identifier {identifier} found in files: "
            f"{self.path_a} and {self.path_b}"
        )


class RenameError(VideoClipperError):
    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Failed to rename image: {message}")


class FramesNotFoundError(VideoClipperError):
    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        super().__init__(f"No images found in target folder {self.directory}")


# ── Output resolution ────────────────────────────────────────────────

class OutputError(VideoClipperError):
    """A filesystem operation on an output or scratch path failed."""


class InvalidHintError(VideoClipperError):
    def __init__(self, hint: Path | str | None, reason: str):
        self.hint = hint
        self.reason = reason
        super().__init__(f"Invalid output path {str(hint)!r}: {reason}")


# ── External tools ───────────────────────────────────────────────────

class ToolFailureError(VideoClipperError):
    def __init__(
        self,
        tool: str,
        stage: str,
        exit_code: int | None,
        stderr_tail: str = "",
    ):
        self.tool = tool
        self.stage = stage
        self.exit_code = exit_code
        self.stderr_tail = stderr_tail
        if exit_code is None:
            message = f"{tool} could not be started during '{stage}'"
        else:
            message = f"{tool} failed during '{stage}' (exit code {exit_code})"
        if stderr_tail.strip():
            message = f"{message}: {stderr_tail.strip().splitlines()[-1]}"
        super().__init__(message)


class PipelineCancelled(VideoClipperError):
    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Interrupted by user during '{stage}'")


# ── Configuration and parameters ─────────────────────────────────────

class ConfigError(VideoClipperError):
    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid configuration {self.path}: {reason}")


class ParameterError(VideoClipperError):
    def __init__(self, parameter: str, reason: str):
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Cannot resolve {parameter}: {reason}")


class InvalidValueError(VideoClipperError):
    def __init__(self, parameter: str, value: object, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {parameter} {value!r}: {reason}")
