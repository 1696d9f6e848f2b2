"""Middleware engine: handler protocols, chain builder and :class:`Engine`.

Public API
----------
- :data:`Handler` / :data:`Middleware` / :data:`NextStyleMiddleware` — callable protocols
- :func:`build_chain` — Fold a list of middleware around a handler
- :func:`adapt_next_style` — Use ``(request, next_handler)`` middleware on an engine
- :class:`Engine` — Ordered registration, single-use composition, dispatch
"""

from middlengine.engine.chain import (
    Handler,
    Middleware,
    NextStyleAdapter,
    NextStyleMiddleware,
    adapt_next_style,
    build_chain,
    callable_name,
)
from middlengine.engine.engine import Engine, EngineState

__all__ = [
    "Engine",
    "EngineState",
    "Handler",
    "Middleware",
    "NextStyleAdapter",
    "NextStyleMiddleware",
    "adapt_next_style",
    "build_chain",
    "callable_name",
]
