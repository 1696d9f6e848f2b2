"""The middleware engine.

:class:`Engine` holds a base handler and an ordered list of middleware.  It
folds the list into a single handler once, on :meth:`Engine.compose`, and
forwards every request to that handler afterwards.

Lifecycle::

    UNCONFIGURED --set_handler--> ASSEMBLING --compose--> COMPOSED
                                  (use)  ^_|

Configuration must finish before requests are dispatched concurrently.  The
engine holds no locks; once composed, every mutating call raises
:class:`~middlengine.errors.EngineStateError`.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from middlengine.engine.chain import Handler, Middleware, build_chain, callable_name
from middlengine.errors import ConfigurationError, EngineStateError

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    UNCONFIGURED = "unconfigured"
    ASSEMBLING = "assembling"
    COMPOSED = "composed"


class Engine:
    """Compose middleware around a base handler and dispatch requests to it.

    The first middleware passed to :meth:`use` becomes the outermost layer:
    its pre-logic runs first and its post-logic runs last.

    An engine is itself a handler, so it can be registered inside another
    engine or mounted by a host server.

    Usage::

        engine = Engine(index)
        engine.use(add_header("X", "1"))
        engine.use(add_header("Y", "2"))
        engine.compose()
        response = engine(request)
    """

    def __init__(self, handler: Optional[Handler] = None) -> None:
        self._base_handler: Optional[Handler] = handler
        self._handler: Optional[Handler] = handler
        self._middlewares: List[Middleware] = []
        self._names: List[str] = []
        self._state = EngineState.ASSEMBLING if handler is not None else EngineState.UNCONFIGURED

    # ── Introspection ────────────────────────────────────────────────

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def composed(self) -> bool:
        return self._state is EngineState.COMPOSED

    @property
    def base_handler(self) -> Optional[Handler]:
        """The innermost handler, still reachable after composition."""
        return self._base_handler

    @property
    def handler(self) -> Optional[Handler]:
        """The current dispatch target (the composed chain once composed)."""
        return self._handler

    @property
    def middlewares(self) -> Tuple[Middleware, ...]:
        """Registered middleware, outermost first."""
        return tuple(self._middlewares)

    def describe(self) -> List[str]:
        """Return layer names outermost first, ending with the base handler."""
        base = callable_name(self._base_handler) if self._base_handler is not None else "<unset>"
        return [*self._names, base]

    def __repr__(self) -> str:
        return (
            f"<Engine state={self._state.value} "
            f"layers={len(self._middlewares)} handler={self.describe()[-1]}>"
        )

    # ── Configuration ────────────────────────────────────────────────

    def _require_not_composed(self, operation: str) -> None:
        if self._state is EngineState.COMPOSED:
            raise EngineStateError(operation, self._state.value)

    def set_handler(self, handler: Handler) -> None:
        """Set or replace the base handler before composition."""
        self._require_not_composed("set the base handler")
        self._base_handler = handler
        self._handler = handler
        self._state = EngineState.ASSEMBLING if handler is not None else EngineState.UNCONFIGURED
        logger.debug("Base handler set to %s.", self.describe()[-1])

    def use(self, middleware: Middleware, *, name: Optional[str] = None) -> None:
        """Append *middleware* to the chain.

        No deduplication or reordering takes place.  *name* overrides the
        label shown by :meth:`describe`.
        """
        self._require_not_composed("register middleware")
        label = name or callable_name(middleware)
        self._middlewares.append(middleware)
        self._names.append(label)
        logger.debug("Middleware #%d registered: %s", len(self._middlewares) - 1, label)

    def use_all(self, middlewares: Iterable[Middleware]) -> None:
        for mw in middlewares:
            self.use(mw)

    def compose(self) -> None:
        """Fold the registered middleware around the base handler.

        Runs once.  The first-registered middleware ends up outermost.

        Raises:
            ConfigurationError: No base handler is set, or a middleware
                returned ``None``.  Both are programming errors and leave the
                engine uncomposed.
            EngineStateError: The chain is already composed.
        """
        self._require_not_composed("compose")
        if self._base_handler is None:
            raise ConfigurationError(
                "Base handler is None: set a valid handler before composing the middleware chain."
            )
        self._handler = build_chain(self._middlewares, self._base_handler, self._names)
        self._state = EngineState.COMPOSED
        logger.info(
            "Middleware chain composed: %d layer(s) around %s.",
            len(self._middlewares),
            self.describe()[-1],
        )
        logger.debug("Chain order (outermost first): %s", " -> ".join(self.describe()))

    # ── Dispatch ─────────────────────────────────────────────────────

    def dispatch(self, request: Any) -> Any:
        """Forward *request* to the current dispatch target and return its result.

        Before :meth:`compose` this is the raw base handler.
        """
        target = self._handler
        if target is None:
            raise ConfigurationError("Cannot dispatch: no base handler has been set.")
        return target(request)

    __call__ = dispatch
