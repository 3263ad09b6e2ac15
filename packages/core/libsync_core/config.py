"""Sync tool settings schema and load helpers."""

from __future__ import annotations

import json
import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping


CONFIG_VERSION = 1
DEFAULT_CONFIG_NAME = "libsync.json"


class ConfigError(Exception):
    """Raised when a config file exists but cannot be used."""


@dataclass
class SourceConfig:
    owner: str = "elliottech"
    repo: str = "lighter-go"
    tag: str = "latest"
    api_base: str = "https://api.github.com"
    html_base: str = "https://github.com"

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass
class LayoutConfig:
    libs_dir: str = "libs"
    readme_name: str = "README.md"


@dataclass
class NetworkConfig:
    api_timeout_s: int = 30
    download_timeout_s: int = 180
    user_agent: str = "lighter-libsync/0.1 (+https://github.com/elliottech/lighter-go)"
    ca_bundle: str | None = None
    allow_insecure_tls: bool = False
    token: str | None = None


@dataclass
class SyncConfig:
    config_version: int = CONFIG_VERSION
    source: SourceConfig = field(default_factory=SourceConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)


def _env_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _merge(dataclass_type, raw: Any):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_source(cfg: SyncConfig) -> None:
    cfg.source.owner = str(cfg.source.owner).strip()
    cfg.source.repo = str(cfg.source.repo).strip()
    cfg.source.tag = str(cfg.source.tag or "latest").strip() or "latest"
    cfg.source.api_base = str(cfg.source.api_base).rstrip("/")
    cfg.source.html_base = str(cfg.source.html_base).rstrip("/")
    if not cfg.source.owner or not cfg.source.repo:
        raise ConfigError("source.owner and source.repo must be non-empty")


def _clean_libs_dir(value: Any) -> str:
    libs_dir = str(value).replace("\\", "/").strip().rstrip("/")
    if not libs_dir:
        raise ConfigError("layout.libs_dir must be a non-empty relative path")
    if libs_dir.startswith("/") or re.match(r"^[A-Za-z]:", libs_dir):
        raise ConfigError(f"layout.libs_dir must be relative to the root, got {value!r}")
    return libs_dir


def _normalize_layout(cfg: SyncConfig) -> None:
    cfg.layout.libs_dir = _clean_libs_dir(cfg.layout.libs_dir)
    cfg.layout.readme_name = str(cfg.layout.readme_name).strip() or "README.md"


def _normalize_network(cfg: SyncConfig) -> None:
    cfg.network.api_timeout_s = max(1, int(cfg.network.api_timeout_s))
    cfg.network.download_timeout_s = max(1, int(cfg.network.download_timeout_s))
    cfg.network.allow_insecure_tls = bool(cfg.network.allow_insecure_tls)
    cfg.network.ca_bundle = cfg.network.ca_bundle or None
    cfg.network.token = cfg.network.token or None


def apply_env_overrides(cfg: SyncConfig, environ: Mapping[str, str] | None = None) -> SyncConfig:
    env = os.environ if environ is None else environ

    ca_bundle = env.get("LIBSYNC_CA_BUNDLE", "").strip()
    if ca_bundle:
        cfg.network.ca_bundle = ca_bundle
    if _env_truthy(env.get("LIBSYNC_ALLOW_INSECURE_TLS")):
        cfg.network.allow_insecure_tls = True

    token = env.get("GITHUB_TOKEN", "").strip()
    if token and not cfg.network.token:
        cfg.network.token = token
    return cfg


def set_repo(cfg: SyncConfig, slug: str) -> None:
    """Apply an ``owner/repo`` override."""
    owner, sep, repo = slug.strip().partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ConfigError(f"Expected OWNER/REPO, got {slug!r}")
    cfg.source.owner = owner
    cfg.source.repo = repo


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> SyncConfig:
    """Load settings from ``path`` over the defaults.

    A missing file yields the defaults. A file that exists but is not a JSON
    object raises :class:`ConfigError`. Environment overrides are applied last.
    """
    raw: dict[str, Any] = {}
    if path is not None and path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"Could not read config {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Config {path} must contain a JSON object")

    try:
        cfg = SyncConfig(
            config_version=int(raw.get("config_version", CONFIG_VERSION)),
            source=_merge(SourceConfig, raw.get("source", {})),
            layout=_merge(LayoutConfig, raw.get("layout", {})),
            network=_merge(NetworkConfig, raw.get("network", {})),
        )
        _normalize_source(cfg)
        _normalize_layout(cfg)
        _normalize_network(cfg)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc

    return apply_env_overrides(cfg, environ)


def redacted(cfg: SyncConfig) -> dict[str, Any]:
    data = asdict(cfg)
    if data["network"].get("token"):
        data["network"]["token"] = "***REDACTED***"
    return data


def set_libs_dir(cfg: SyncConfig, value: str) -> None:
    """Apply a libs directory override, relative to the sync root."""
    cfg.layout.libs_dir = _clean_libs_dir(value)
