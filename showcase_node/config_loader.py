"""Config loader: resolve the engine configuration at startup.

Workers call `load_config()` instead of `EngineConfig()`.

Resolution order:
1. `SHOWCASE_CONFIG_FILE` env var: path to a JSON document
2. `SHOWCASE_CONFIG_MODULE` env var (e.g. `my_package.settings:CONFIG`)
3. `showcase_node.engine_config:EngineConfig` (engine default)

A source that is configured but cannot be loaded raises ConfigurationError;
a broken configuration is fatal to startup.
"""
from __future__ import annotations

import importlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from showcase_node.engine_config import EngineConfig
from showcase_node.errors import ConfigurationError

logger = logging.getLogger(__name__)

_cached_config: EngineConfig | None = None


def load_config() -> EngineConfig:
    """Load and cache the EngineConfig instance."""
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    config = _resolve_config()
    _cached_config = config
    return config


def _resolve_config() -> EngineConfig:
    config_file = os.getenv("SHOWCASE_CONFIG_FILE", "").strip()
    if config_file:
        config = load_config_file(config_file)
        logger.info("Loaded config from SHOWCASE_CONFIG_FILE=%s", config_file)
        return config

    module_path = os.getenv("SHOWCASE_CONFIG_MODULE", "").strip()
    if module_path:
        config = load_config_object(module_path)
        logger.info("Loaded config from SHOWCASE_CONFIG_MODULE=%s", module_path)
        return config

    logger.info("Using default EngineConfig (no override configured)")
    return EngineConfig()


def load_config_file(path: str | Path) -> EngineConfig:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a JSON object")
    return EngineConfig.load(data)


def load_config_object(path: str) -> EngineConfig:
    """Import a config from `module.path:Name`.

    `Name` may be an EngineConfig subclass (instantiated), an instance, or a
    plain dict of options.
    """
    if ":" not in path:
        raise ConfigurationError(f"Invalid config path '{path}'. Expected '<module>:<name>'.")
    module_name, attr_name = path.rsplit(":", 1)

    try:
        module = importlib.import_module(module_name)
        target: Any = getattr(module, attr_name)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"cannot import config {path}: {exc}") from exc

    if isinstance(target, type) and issubclass(target, EngineConfig):
        try:
            return target()
        except ValueError as exc:
            raise ConfigurationError(f"invalid engine configuration in {path}: {exc}") from exc
    if isinstance(target, EngineConfig):
        return target
    if isinstance(target, dict):
        return EngineConfig.load(target)

    raise ConfigurationError(f"Resolved object '{path}' is not an engine configuration.")


def reset_cache() -> None:
    """Clear the cached config (for testing)."""
    global _cached_config
    _cached_config = None
