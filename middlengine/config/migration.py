"""Environment variable expansion for engine config files.

``${VAR}`` placeholders are expanded in every string value before
validation.  An unset variable leaves its placeholder in place, except
inside an import reference (any ``ref`` key): a ``ref`` that still holds a
placeholder can never be imported, so it is reported immediately.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, List, Tuple

from middlengine.errors import ConfigurationError

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

# Keys whose values must be fully expanded.
STRICT_KEYS = frozenset({"ref"})


def _location(path: Tuple[Any, ...]) -> str:
    return " → ".join(str(part) for part in path) or "<root>"


def _substitute(text: str, path: Tuple[Any, ...], strict: bool) -> str:
    missing: List[str] = []

    def _lookup(match: "re.Match[str]") -> str:
        value = os.environ.get(match.group(1))
        if value is None:
            missing.append(match.group(1))
            return match.group(0)
        return value

    expanded = _ENV_VAR_RE.sub(_lookup, text)
    if missing:
        if strict:
            raise ConfigurationError(
                f"Unset environment variable(s) {', '.join(missing)} in "
                f"{_location(path)} ('{text}')."
            )
        logger.debug("Left unset variable(s) %s in %s.", missing, _location(path))
    return expanded


def expand_env_vars(value: Any, _path: Tuple[Any, ...] = ()) -> Any:
    """Recursively expand ``${VAR}`` references in string values.

    Dicts and lists are walked recursively; other leaves are returned as-is.

    Raises:
        ConfigurationError: A variable used in a ``ref`` value is unset.
    """
    if isinstance(value, str):
        strict = bool(_path) and _path[-1] in STRICT_KEYS
        return _substitute(value, _path, strict)
    if isinstance(value, dict):
        return {k: expand_env_vars(v, (*_path, k)) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item, (*_path, idx)) for idx, item in enumerate(value)]
    return value
