"""On-disk configuration: load, store and interactive initialisation."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
import yaml
from pydantic import ValidationError

from .contracts import AppConfig
from .errors import ConfigError, InvalidValueError
from .params import FPS, MULTIPLE_OPACITY_CHECK, OPACITY, PIXEL_LIMIT, SAMPLING_NUMBER

logger = logging.getLogger(__name__)

APP_NAME = "videoclipper"
CONFIG_FILE_NAME = "config.yaml"


def app_dir() -> Path:
    """Per-user application directory (config and logs live here)."""
    return Path(typer.get_app_dir(APP_NAME))


def default_config_path() -> Path:
    return app_dir() / CONFIG_FILE_NAME


def default_log_dir() -> Path:
    return app_dir() / "logs"


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config.yaml, creating it with defaults on first run."""
    path = Path(config_path) if config_path is not None else default_config_path()
    if not path.exists():
        logger.info(f"No configuration found, writing defaults to {path}")
        config = AppConfig()
        store_config(config, path)
        return config

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(path, str(e)) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(path, "expected a mapping of settings")

    try:
        config = AppConfig(**raw)
    except ValidationError as e:
        raise ConfigError(path, str(e)) from e
    logger.debug(f"Configuration loaded from {path}")
    return config


def store_config(config: AppConfig, config_path: Path | None = None) -> Path:
    """Write the configuration as YAML and return the file path."""
    path = Path(config_path) if config_path is not None else default_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.model_dump(), f, sort_keys=False)
    except OSError as e:
        raise ConfigError(path, f"cannot write configuration: {e}") from e
    logger.debug(f"Configuration stored at {path}")
    return path


def initialize_configuration(config_path: Path | None = None) -> AppConfig:
    """Prompt for every setting, defaulting to the current value, then store."""
    path = Path(config_path) if config_path is not None else default_config_path()
    config = load_config(path)

    audio = typer.prompt(
        "Default audio file or directory (leave empty to skip)",
        default=config.audio_path or "",
        show_default=bool(config.audio_path),
    )
    config.audio_path = audio.strip() or None

    config.fps = _prompt_checked("Default FPS", config.fps, int, FPS.check)
    config.pixel_upper_limit = _prompt_checked(
        "Default pixel upper limit", config.pixel_upper_limit, int, PIXEL_LIMIT.check
    )
    config.sampling_number = _prompt_checked(
        "Default number of frames to sample", config.sampling_number, int, SAMPLING_NUMBER.check
    )
    config.opacity = _prompt_checked(
        "Overall opacity (0.0 - 1.0)", config.opacity, float, OPACITY.check
    )
    config.multiple_opacities_1 = _prompt_checked(
        "multiple_opacities_1 (0.0 - 1.0)", config.multiple_opacities_1, float, MULTIPLE_OPACITY_CHECK
    )
    config.multiple_opacities_2 = _prompt_checked(
        "multiple_opacities_2 (0.0 - 1.0)", config.multiple_opacities_2, float, MULTIPLE_OPACITY_CHECK
    )
    config.multiple_opacities_3 = _prompt_checked(
        "multiple_opacities_3 (0.0 - 1.0)", config.multiple_opacities_3, float, MULTIPLE_OPACITY_CHECK
    )
    config.keep_scratch = typer.confirm(
        "Keep scratch directories after each run", default=config.keep_scratch
    )

    store_config(config, path)
    return config


def _prompt_checked(text: str, current, value_type, check):
    """Re-prompt until the answer passes the parameter's validity rule."""
    while True:
        answer = typer.prompt(text, default=current, type=value_type)
        try:
            return check(answer)
        except InvalidValueError as e:
            typer.secho(str(e), fg=typer.colors.RED, err=True)
