"""Pydantic configuration models for middlengine.

Defines the validated structure of an engine config file (v1 format).
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from middlengine.constants import CONFIG_VERSION, DEFAULT_HOST, DEFAULT_PORT

# module.path:attribute[.attribute]
_REF_PATTERN = r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$"


# ── Components ───────────────────────────────────────────────────────────


class ComponentRef(BaseModel):
    """Importable object referenced as ``module.path:attribute``."""

    ref: str = Field(
        ...,
        pattern=_REF_PATTERN,
        description="Import reference, e.g. 'myapp.handlers:index'.",
    )
    options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments passed when the reference is a factory.",
    )
    factory: bool = Field(
        default=False,
        description="Call the referenced object to obtain the component.",
    )

    @model_validator(mode="after")
    def _options_imply_factory(self) -> "ComponentRef":
        if self.options and not self.factory:
            self.factory = True
        return self


class MiddlewareEntry(ComponentRef):
    """One layer of the middleware chain."""

    style: Literal["wrap", "next"] = Field(
        default="wrap",
        description=(
            "'wrap' for handler -> handler callables, "
            "'next' for (request, next_handler) callables."
        ),
    )
    enabled: bool = True
    name: Optional[str] = Field(default=None, description="Display name for this layer.")


# ── Server ───────────────────────────────────────────────────────────────


class ServerSettings(BaseModel):
    """Settings for ``middlengine serve``."""

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)


# ── Top-level ────────────────────────────────────────────────────────────


class EngineConfig(BaseModel):
    """Root of an engine config file."""

    version: str = CONFIG_VERSION
    handler: ComponentRef
    middlewares: List[MiddlewareEntry] = Field(default_factory=list)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        if isinstance(value, int):
            value = str(value)
        return value

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if value != CONFIG_VERSION:
            raise ValueError(f"Unsupported config version '{value}' (expected '{CONFIG_VERSION}').")
        return value

    @property
    def enabled_middlewares(self) -> List[MiddlewareEntry]:
        return [mw for mw in self.middlewares if mw.enabled]
