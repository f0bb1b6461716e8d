"""Layered parameter resolution: CLI > environment > config file > default.

Each scalar parameter is described by a ``ParameterSpec`` carrying the
environment variable it answers to, the config field it reads, how to parse
a raw string and the validity rule applied to every source.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

from .contracts import AppConfig
from .errors import InvalidValueError, ParameterError

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = ("mp3", "wav", "flac")
DEFAULT_MULTIPLE_OPACITIES = (0.25, 0.5, 0.75)

_MISSING = object()


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    env_var: str | None
    config_field: str | None
    parse: Callable[[str], Any]
    check: Callable[[Any], Any]
    default: Any = _MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING


@dataclass(frozen=True)
class Resolved:
    value: Any
    source: str  # "cli" | "env" | "config" | "default"


# ── Validity rules ───────────────────────────────────────────────────

def _positive_int(name: str) -> Callable[[Any], int]:
    def check(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidValueError(name, value, "must be an integer")
        if value <= 0:
            raise InvalidValueError(name, value, "must be greater than zero")
        return value

    return check


def _unit_interval(name: str) -> Callable[[Any], float]:
    def check(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidValueError(name, value, "must be a number")
        value = float(value)
        if math.isnan(value) or not 0.0 <= value <= 1.0:
            raise InvalidValueError(name, value, "must be between 0.0 and 1.0")
        return value

    return check


def _parse_int(name: str) -> Callable[[str], int]:
    def parse(raw: str) -> int:
        try:
            return int(raw.strip())
        except ValueError as e:
            raise InvalidValueError(name, raw, "not an integer") from e

    return parse


def _parse_float(name: str) -> Callable[[str], float]:
    def parse(raw: str) -> float:
        try:
            return float(raw.strip())
        except ValueError as e:
            raise InvalidValueError(name, raw, "not a number") from e

    return parse


def _parse_opacity_triple(raw: str) -> tuple[float, float, float]:
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 3:
        raise InvalidValueError("multiple opacities", raw, "expected exactly three comma-separated values")
    parse = _parse_float("multiple opacities")
    return tuple(parse(p) for p in parts)  # type: ignore[return-value]


def _check_opacity_triple(values: Any) -> tuple[float, float, float]:
    if not isinstance(values, (tuple, list)) or len(values) != 3:
        raise InvalidValueError("multiple opacities", values, "expected three values")
    check = _unit_interval("multiple opacities")
    return tuple(check(v) for v in values)  # type: ignore[return-value]


def find_audio_file(path_or_dir: Path | str) -> Path:
    """Return the audio file named by ``path_or_dir``.

    A file must carry a supported extension; a directory must contain at
    least one such file (the lexicographically first is used).
    """
    path = Path(path_or_dir).expanduser()
    if path.is_file():
        if path.suffix.lower().lstrip(".") in AUDIO_EXTENSIONS:
            return path
        raise InvalidValueError("audio path", str(path), "not a supported audio file (mp3, wav, flac)")
    if path.is_dir():
        candidates = sorted(
            p for p in path.iterdir()
            if p.is_file() and p.suffix.lower().lstrip(".") in AUDIO_EXTENSIONS
        )
        if not candidates:
            raise InvalidValueError("audio path", str(path), "directory contains no audio file")
        if len(candidates) > 1:
            logger.warning(f"Several audio files in {path}, using {candidates[0].name}")
        return candidates[0]
    raise InvalidValueError("audio path", str(path), "does not exist")


def _check_audio(value: Any) -> Path:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidValueError("audio path", value, "empty path")
    return find_audio_file(value)


# ── Parameter table ──────────────────────────────────────────────────

FPS = ParameterSpec(
    name="fps",
    env_var="FXP_VIDEOCLIPPER_FPS",
    config_field="fps",
    parse=_parse_int("fps"),
    check=_positive_int("fps"),
)

PIXEL_LIMIT = ParameterSpec(
    name="pixel upper limit",
    env_var="FRAME_EXPORTER_PIXEL_LIMIT",
    config_field="pixel_upper_limit",
    parse=_parse_int("pixel upper limit"),
    check=_positive_int("pixel upper limit"),
)

OPACITY = ParameterSpec(
    name="opacity",
    env_var="EMP_TRANSFER_COLORS_OPACITY",
    config_field="opacity",
    parse=_parse_float("opacity"),
    check=_unit_interval("opacity"),
    default=0.5,
)

MULTIPLE_OPACITY_CHECK = _unit_interval("multiple opacities")

MULTIPLE_OPACITIES = ParameterSpec(
    name="multiple opacities",
    env_var="EMP_TRANSFER_COLORS_MULTIPLE_OPACITIES",
    config_field=None,
    parse=_parse_opacity_triple,
    check=_check_opacity_triple,
    default=DEFAULT_MULTIPLE_OPACITIES,
)

SAMPLING_NUMBER = ParameterSpec(
    name="sampling number",
    env_var="FRAME_EXPORTER_SAMPLING_NUMBER",
    config_field="sampling_number",
    parse=_parse_int("sampling number"),
    check=_positive_int("sampling number"),
    default=10,
)

AUDIO = ParameterSpec(
    name="audio path",
    env_var="FXP_VIDEOCLIPPER_AUDIO",
    config_field="audio_path",
    parse=lambda raw: raw.strip(),
    check=_check_audio,
    default=None,
)

DURATION = ParameterSpec(
    name="duration",
    env_var=None,
    config_field=None,
    parse=_parse_int("duration"),
    check=_positive_int("duration"),
    default=None,
)

ALL_PARAMETERS = (AUDIO, FPS, PIXEL_LIMIT, OPACITY, MULTIPLE_OPACITIES, SAMPLING_NUMBER, DURATION)


# ── Resolution ───────────────────────────────────────────────────────

def _config_value(spec: ParameterSpec, config: AppConfig | None) -> Any:
    if config is None:
        return None
    if spec is MULTIPLE_OPACITIES:
        return (
            config.multiple_opacities_1,
            config.multiple_opacities_2,
            config.multiple_opacities_3,
        )
    if spec.config_field is None:
        return None
    return getattr(config, spec.config_field, None)


def resolve_with_source(
    spec: ParameterSpec,
    cli_value: Any = None,
    config: AppConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> Resolved:
    """Resolve ``spec`` and report which source supplied the value."""
    env = os.environ if environ is None else environ

    if cli_value is not None:
        value = spec.check(spec.parse(cli_value) if isinstance(cli_value, str) else cli_value)
        logger.debug(f"Using {spec.name} from command line: {value}")
        return Resolved(value, "cli")

    if spec.env_var is not None:
        raw = env.get(spec.env_var)
        if raw is not None and raw.strip():
            value = spec.check(spec.parse(raw))
            logger.debug(f"Using {spec.name} from {spec.env_var}: {value}")
            return Resolved(value, "env")

    config_value = _config_value(spec, config)
    if config_value is not None and not (isinstance(config_value, str) and not config_value.strip()):
        try:
            value = spec.check(config_value)
        except InvalidValueError as e:
            logger.warning(f"Ignoring configured {spec.name}: {e}")
        else:
            logger.debug(f"Using {spec.name} from configuration file: {value}")
            return Resolved(value, "config")

    if spec.has_default:
        logger.debug(f"Using default {spec.name}: {spec.default}")
        return Resolved(spec.default, "default")
    raise ParameterError(spec.name, "no valid value on the command line, environment or configuration")


def resolve(
    spec: ParameterSpec,
    cli_value: Any = None,
    config: AppConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> Any:
    return resolve_with_source(spec, cli_value, config, environ).value


def resolve_sampling_number(
    multiple: bool,
    number: int | None,
    config: AppConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Frames to sample: 1 unless --multiple or an explicit count is given."""
    if number is None and not multiple:
        return 1
    return resolve(SAMPLING_NUMBER, number, config, environ)
