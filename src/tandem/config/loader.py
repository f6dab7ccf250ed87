"""Reading, writing and applying ``tandem.yaml``."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError
from rich.logging import RichHandler

from tandem.config.schema import LoggingConfig, TandemConfig
from tandem.errors import TandemError

DEFAULT_CONFIG_PATH = Path.home() / ".tandem" / "tandem.yaml"
CONFIG_ENV_VAR = "TANDEM_CONFIG"

# HTTP client loggers log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


class ConfigError(TandemError):
    """The configuration file could not be read or is invalid."""


def resolve_config_path(path: Path | None = None) -> Path:
    """Pick the config file: explicit path, then ``$TANDEM_CONFIG``, then the default."""
    if path is not None:
        return path
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> TandemConfig:
    """Load and validate tandem configuration.

    A missing or empty file yields the defaults, so tandem runs without
    any configuration.

    Args:
        path: Config file; see :func:`resolve_config_path` when omitted

    Raises:
        ConfigError: If the file exists but cannot be parsed or validated
    """
    path = resolve_config_path(path)
    if not path.exists():
        return TandemConfig()

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    if data is None:
        return TandemConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")

    try:
        return TandemConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e


def save_config(config: TandemConfig, path: str | Path | None = None) -> None:
    """Write ``config`` as YAML, creating parent directories as needed."""
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False))


def setup_logging(config: LoggingConfig) -> None:
    """Route log records through rich at the configured level.

    HTTP client loggers stay at WARNING unless the level is DEBUG.
    """
    logging.basicConfig(
        level=config.level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    noisy_level = logging.DEBUG if config.level == "DEBUG" else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
