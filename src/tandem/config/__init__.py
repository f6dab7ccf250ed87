"""Configuration schema and YAML loading."""

from tandem.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    ConfigError,
    load_config,
    resolve_config_path,
    save_config,
    setup_logging,
)
from tandem.config.schema import (
    AgentConfig,
    LoggingConfig,
    ModelConfig,
    PlannerConfig,
    ProviderConfig,
    TandemConfig,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "AgentConfig",
    "ConfigError",
    "LoggingConfig",
    "ModelConfig",
    "PlannerConfig",
    "ProviderConfig",
    "TandemConfig",
    "load_config",
    "resolve_config_path",
    "save_config",
    "setup_logging",
]
