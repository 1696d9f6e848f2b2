"""Resolution of ``module.path:attribute`` references from config files."""

from __future__ import annotations

import importlib
import inspect
import logging
from typing import Any

from middlengine.config.schema import ComponentRef
from middlengine.errors import ReferenceResolutionError

logger = logging.getLogger(__name__)


def resolve_ref(ref: str) -> Any:
    """Import the module part of *ref* and return the named attribute.

    The attribute part may be dotted (``pkg.mod:Class.method``).

    Raises:
        ReferenceResolutionError: If the reference is malformed, the module
            cannot be imported or the attribute does not exist.
    """
    module_name, sep, attr_path = ref.partition(":")
    if not sep or not module_name or not attr_path:
        raise ReferenceResolutionError(ref, "expected the form 'module.path:attribute'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ReferenceResolutionError(ref, f"module '{module_name}' cannot be imported", exc) from exc

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise ReferenceResolutionError(ref, f"attribute '{part}' not found", exc) from exc
    logger.debug("Resolved reference '%s'.", ref)
    return obj


def instantiate(component: ComponentRef) -> Any:
    """Resolve *component* and call it with its options when it is a factory."""
    obj = resolve_ref(component.ref)
    if not component.factory:
        return obj
    if not callable(obj):
        raise ReferenceResolutionError(component.ref, "factory is not callable")
    try:
        signature = inspect.signature(obj)
    except (TypeError, ValueError):
        # No introspectable signature (some builtins); let the call decide.
        signature = None
    if signature is not None:
        try:
            signature.bind(**component.options)
        except TypeError as exc:
            raise ReferenceResolutionError(
                component.ref, f"factory rejected options {sorted(component.options)}", exc
            ) from exc
    return obj(**component.options)
