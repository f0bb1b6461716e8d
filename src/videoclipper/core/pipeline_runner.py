"""Mode dispatcher: imports the step for a mode and executes it."""

from __future__ import annotations

import importlib
import logging
from typing import Any, Mapping

from pydantic import BaseModel

from .contracts import Mode
from ..utils.interrupt import CancelToken

logger = logging.getLogger(__name__)

MODE_MODULES: dict[Mode, str] = {
    Mode.EXPORT: "videoclipper.steps.export",
    Mode.SAMPLE: "videoclipper.steps.sample",
    Mode.MERGE: "videoclipper.steps.merge",
    Mode.CLUT: "videoclipper.steps.clut",
    Mode.CLIP: "videoclipper.steps.clip",
    Mode.FILTER: "videoclipper.steps.filter",
}


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'videoclipper.steps.clip'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "ModeStep"
            and getattr(attr, "__module__", None) == step_module.__name__
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def step_class_for(mode: Mode | str):
    return import_step_class(MODE_MODULES[Mode(mode)])


def run_mode(
    mode: Mode | str,
    config: BaseModel | Mapping[str, Any],
    inputs: BaseModel | Mapping[str, Any],
    cancel: CancelToken | None = None,
    keep_scratch: bool = False,
) -> BaseModel:
    """Build the step for ``mode`` and execute it."""
    mode = Mode(mode)
    step_cls = step_class_for(mode)
    if not isinstance(config, BaseModel):
        config = step_cls.config_type(**config)
    if not isinstance(inputs, BaseModel):
        inputs = step_cls.input_type(**inputs)

    logger.debug(f"--- Mode: {mode.value} ({step_cls.__name__}) ---")
    step = step_cls(config=config, cancel=cancel, keep_scratch=keep_scratch)
    return step.execute(inputs)
