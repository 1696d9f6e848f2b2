"""Configuration file loading and engine assembly.

Loads a YAML configuration file, expands ``${ENV_VAR}`` placeholders,
validates against the Pydantic models defined in :mod:`schema` and turns the
result into an :class:`~middlengine.engine.Engine`.

The public API is :func:`load_engine_config` (file -> model) and
:func:`build_engine` (model -> uncomposed engine).
"""

import logging
import os
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from middlengine.config.migration import expand_env_vars
from middlengine.config.refs import instantiate
from middlengine.config.schema import EngineConfig
from middlengine.engine import Engine, adapt_next_style, callable_name
from middlengine.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Recognised config file extensions.
_YAML_EXTS = frozenset({".yaml", ".yml"})


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse a YAML config file from *cfg_fpath*.

    Raises :class:`ConfigurationError` on I/O or parse errors.
    """
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Only YAML files (.yaml, .yml) are supported."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            "Top-level configuration content must be a YAML mapping (dictionary)."
        )
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic validation errors into a readable multi-line string."""
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


# ── Public API ───────────────────────────────────────────────────────────


def parse_engine_config(raw_data: Dict[str, Any]) -> EngineConfig:
    """Expand env vars in *raw_data* and validate it as an :class:`EngineConfig`."""
    raw_data = expand_env_vars(raw_data)
    try:
        return EngineConfig.model_validate(raw_data)
    except ValidationError as exc:
        error_summary = _format_validation_errors(exc)
        raise ConfigurationError(
            f"Configuration validation failed ({len(exc.errors())} error(s)):\n" f"{error_summary}"
        ) from exc


def load_engine_config(cfg_fpath: str) -> EngineConfig:
    """Load, expand and validate the config file at *cfg_fpath*.

    Steps:
        1. Read YAML file
        2. Expand ``${VAR}`` environment variable references
        3. Validate against :class:`EngineConfig` (Pydantic)

    Raises:
        ConfigurationError: On file I/O errors, parse errors, or
            validation failures (all errors reported at once).
    """
    logger.debug("Loading configuration file: %s", cfg_fpath)

    if not os.path.exists(cfg_fpath):
        raise ConfigurationError(f"Configuration file does not exist: {cfg_fpath}")

    config = parse_engine_config(_read_config_file(cfg_fpath))
    logger.info(
        "Configuration '%s' loaded (v%s). %d middleware entr(y/ies), %d enabled.",
        cfg_fpath,
        config.version,
        len(config.middlewares),
        len(config.enabled_middlewares),
    )
    return config


def build_engine(config: EngineConfig) -> Engine:
    """Resolve every reference in *config* and register it on a new engine.

    The engine is returned uncomposed so the host decides when to freeze it.
    Disabled middleware entries are skipped.
    """
    engine = Engine(instantiate(config.handler))
    for idx, entry in enumerate(config.middlewares):
        if not entry.enabled:
            logger.debug("Middleware #%d (%s) disabled; skipping.", idx, entry.ref)
            continue
        mw = instantiate(entry)
        if not callable(mw):
            raise ConfigurationError(f"Middleware '{entry.ref}' is not callable.")
        label = entry.name or callable_name(mw)
        if entry.style == "next":
            mw = adapt_next_style(mw)
        engine.use(mw, name=label)
    return engine


def load_engine(cfg_fpath: str) -> Engine:
    """Shortcut for ``build_engine(load_engine_config(cfg_fpath))``."""
    return build_engine(load_engine_config(cfg_fpath))
