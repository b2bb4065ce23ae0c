"""Runtime settings for linux-update.

Settings are resolved once at process start (defaults, then an optional YAML
file, then environment variables) and passed explicitly to the components
that need them.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import Constants
from errors import ConfigError

logger = logging.getLogger(__name__)

_ENV_KEYS = {
    "releases_uri": Constants.ENV_RELEASES_URI,
    "sources_base_dir": Constants.ENV_SOURCES_BASE_DIR,
    "cache_dir": Constants.ENV_CACHE_DIR,
    "make": Constants.ENV_MAKE,
}

CONFIG_SECTION = "linux_update"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""

    releases_uri: str = Constants.RELEASES_URI
    sources_base_dir: Path = Path(Constants.SOURCES_BASE_DIR)
    cache_dir: Path = Path(Constants.CACHE_DIR)
    make: str = Constants.MAKE

    def with_overrides(self, values: Mapping[str, Any]) -> "Settings":
        """Return a copy with the known, non-empty keys of ``values`` applied."""
        changes: Dict[str, Any] = {}
        for key in _ENV_KEYS:
            value = values.get(key)
            if value is None or str(value).strip() == "":
                continue
            if key in ("sources_base_dir", "cache_dir"):
                changes[key] = Path(str(value)).expanduser()
            else:
                changes[key] = str(value).strip()
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        return cls().with_overrides(_env_values(environ))


def _env_values(environ: Optional[Mapping[str, str]]) -> Dict[str, str]:
    env = os.environ if environ is None else environ
    return {key: env[var] for key, var in _ENV_KEYS.items() if var in env}


def _load_config_file(config_path: str) -> Dict[str, Any]:
    """Read settings from a YAML (or JSON, which is valid YAML) file."""
    if not os.path.isfile(config_path):
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {config_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a mapping")
    section = data.get(CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{CONFIG_SECTION}' in {config_path} must be a mapping")
    unknown = sorted(set(section) - set(_ENV_KEYS))
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", config_path, ", ".join(unknown))
    return section


def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Resolve settings: defaults < config file < environment."""
    settings = Settings()
    if config_path:
        settings = settings.with_overrides(_load_config_file(config_path))
        logger.debug("Loaded config from: %s", config_path)
    return settings.with_overrides(_env_values(environ))
