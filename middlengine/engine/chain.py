"""Core middleware chain infrastructure.

Defines the handler/middleware protocols and the chain builder that folds an
ordered list of middleware around a base handler.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Iterable, List, Protocol, Sequence

from middlengine.errors import ConfigurationError

# ── Type protocols ───────────────────────────────────────────────────────


class Handler(Protocol):
    """Callable that processes one request and returns one response.

    The response may be a plain value or an awaitable; the chain never
    inspects it.
    """

    def __call__(self, request: Any) -> Any: ...


class Middleware(Protocol):
    """Callable that wraps an inner handler and returns a new handler."""

    def __call__(self, inner: Handler) -> Handler: ...


class NextStyleMiddleware(Protocol):
    """Callable taking the request and the next handler in the chain."""

    def __call__(self, request: Any, next_handler: Handler) -> Any: ...


# ── Helpers ──────────────────────────────────────────────────────────────


def callable_name(obj: Any) -> str:
    """Return a readable name for a handler or middleware."""
    explicit = getattr(obj, "__middleware_name__", None)
    if isinstance(explicit, str):
        return explicit
    if isinstance(obj, functools.partial):
        return f"partial({callable_name(obj.func)})"
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if name is None:
        name = type(obj).__qualname__
    module = getattr(obj, "__module__", None) or type(obj).__module__
    if module and module not in ("builtins", "__main__"):
        return f"{module}.{name}"
    return name


class NextStyleAdapter:
    """Wrapping middleware built from a ``(request, next_handler)`` callable."""

    def __init__(self, middleware: NextStyleMiddleware) -> None:
        self.middleware = middleware
        self.__middleware_name__ = callable_name(middleware)

    def __call__(self, inner: Handler) -> Handler:
        mw = self.middleware

        def handler(request: Any) -> Any:
            return mw(request, inner)

        return handler

    def __repr__(self) -> str:
        return f"NextStyleAdapter({self.__middleware_name__})"


def adapt_next_style(middleware: NextStyleMiddleware) -> Middleware:
    """Turn a ``(request, next_handler)`` middleware into a wrapping middleware.

    The inner handler is passed through as ``next_handler``, so an async
    middleware awaits it and a sync middleware calls it directly.

    Example::

        async def timing(request, next_handler):
            start = time.monotonic()
            try:
                return await next_handler(request)
            finally:
                request.state.elapsed = time.monotonic() - start

        engine.use(adapt_next_style(timing))
    """
    return NextStyleAdapter(middleware)


# ── Chain builder ────────────────────────────────────────────────────────


def build_chain(
    middlewares: Sequence[Middleware],
    handler: Handler,
    names: Iterable[str] | None = None,
) -> Handler:
    """Compose *middlewares* around a final *handler*.

    Middleware are applied in list order: the first middleware in the list
    is the outermost wrapper (executed first for requests, last for
    responses).  An empty list returns *handler* itself.

    Args:
        middlewares: Callables conforming to :class:`Middleware`.
        handler: The innermost handler.
        names: Optional display names, parallel to *middlewares*, used in
            error messages.

    Returns:
        The composed handler.

    Raises:
        ConfigurationError: If *handler* is ``None`` or a middleware returns
            ``None`` instead of a handler.
    """
    if handler is None:
        raise ConfigurationError(
            "Base handler is None: set a valid handler before composing the middleware chain."
        )
    labels: List[str] = list(names) if names is not None else []
    chain = handler
    for idx in range(len(middlewares) - 1, -1, -1):
        mw = middlewares[idx]
        wrapped: Callable[..., Any] = mw(chain)
        if wrapped is None:
            label = labels[idx] if idx < len(labels) else callable_name(mw)
            raise ConfigurationError(
                f"Middleware #{idx} ({label}) returned None instead of a handler."
            )
        chain = wrapped
    return chain
