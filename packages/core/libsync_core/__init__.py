"""Core services for settings and logging."""

from .config import (
    ConfigError,
    LayoutConfig,
    NetworkConfig,
    SourceConfig,
    SyncConfig,
    apply_env_overrides,
    load_config,
    redacted,
    set_libs_dir,
    set_repo,
)
from .logging_setup import configure_logging, get_logger

__all__ = [
    "ConfigError",
    "LayoutConfig",
    "NetworkConfig",
    "SourceConfig",
    "SyncConfig",
    "apply_env_overrides",
    "configure_logging",
    "get_logger",
    "load_config",
    "redacted",
    "set_libs_dir",
    "set_repo",
]
