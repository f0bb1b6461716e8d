"""Base class for all modes.

Every mode declares typed Input, Output and Config models, so the CLI can
build them from options and the dispatcher can run any mode the same way.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

from .errors import ParameterError, PipelineCancelled
from ..utils.interrupt import CancelToken

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class ModeStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for modes.

    Subclasses must:
    1. Define concrete Pydantic models for InputT, OutputT, ConfigT
    2. Set class variables: name, input_type, output_type, config_type
    3. Implement run() and validate_inputs()

    ``cancel`` is polled between external tool invocations and by the
    subprocess supervisor; ``keep_scratch`` retains scratch directories.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(
        self,
        config: ConfigT,
        cancel: CancelToken | None = None,
        keep_scratch: bool = False,
    ):
        self.config = config
        self.cancel = cancel if cancel is not None else CancelToken()
        self.keep_scratch = keep_scratch

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this mode. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that all required input paths exist and are usable."""
        ...

    def check_cancelled(self, stage: str) -> None:
        if self.cancel.is_cancelled():
            raise PipelineCancelled(stage)

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, and validation."""
        step_name = self.name or self.__class__.__name__
        logger.debug(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise ParameterError(f"{step_name} input", "validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.1f}s")
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        return cls.config_type.model_json_schema()
