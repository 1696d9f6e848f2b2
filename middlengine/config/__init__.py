"""Configuration loading for middlengine (YAML + Pydantic)."""

from middlengine.config.loader import (
    build_engine,
    load_engine,
    load_engine_config,
    parse_engine_config,
)
from middlengine.config.refs import instantiate, resolve_ref
from middlengine.config.schema import (
    ComponentRef,
    EngineConfig,
    MiddlewareEntry,
    ServerSettings,
)

__all__ = [
    "ComponentRef",
    "EngineConfig",
    "MiddlewareEntry",
    "ServerSettings",
    "build_engine",
    "instantiate",
    "load_engine",
    "load_engine_config",
    "parse_engine_config",
    "resolve_ref",
]
