"""videoclipper core: mode dispatch, base step, shared contracts, filename index."""

from .step_base import ModeStep
from .contracts import AppConfig, Mode, OutputTarget
from .filenames import FilenameParts, FrameIndex, load_directory, load_files
from .output import resolve_output
from .pipeline_runner import run_mode, import_step_class
from .logging import setup_logging

__all__ = [
    "ModeStep",
    "AppConfig",
    "Mode",
    "OutputTarget",
    "FilenameParts",
    "FrameIndex",
    "load_directory",
    "load_files",
    "resolve_output",
    "run_mode",
    "import_step_class",
    "setup_logging",
]
