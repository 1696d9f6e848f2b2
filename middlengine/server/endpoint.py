"""Pure ASGI endpoint that dispatches HTTP requests through an engine.

Uses the ASGI interface directly (no ``BaseHTTPMiddleware``) so the engine
sees a plain Starlette :class:`~starlette.requests.Request` and may return
either a :class:`~starlette.responses.Response` or a simple value.
"""

import inspect
import logging
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from middlengine.engine import Engine
from middlengine.errors import ConfigurationError

logger = logging.getLogger(__name__)


def to_response(result: Any) -> Response:
    """Coerce a handler result into a Starlette response."""
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status_code=204)
    if isinstance(result, (bytes, bytearray)):
        return Response(bytes(result))
    if isinstance(result, str):
        return PlainTextResponse(result)
    if isinstance(result, (dict, list)):
        return JSONResponse(result)
    raise TypeError(
        f"Handler returned {type(result).__name__}; expected a Response, "
        "str, bytes, dict, list or None."
    )


class EngineEndpoint:
    """ASGI app forwarding every HTTP request to *engine*.

    Exceptions raised by the chain propagate to the surrounding Starlette
    application unchanged.  An uncomposed engine is refused: when the
    endpoint is mounted inside another application its lifespan never runs,
    and serving the bare base handler would skip every middleware layer.

    Usage::

        app = Starlette(routes=[Mount("/", app=EngineEndpoint(engine))])
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            raise RuntimeError(f"EngineEndpoint only handles HTTP, got '{scope['type']}'.")
        if not self.engine.composed:
            raise ConfigurationError(
                f"Refusing to serve {self.engine!r}: the middleware chain is not composed. "
                "Call engine.compose() before mounting it in another application."
            )

        request = Request(scope, receive=receive)
        result = self.engine.dispatch(request)
        if inspect.isawaitable(result):
            result = await result
        response = to_response(result)
        await response(scope, receive, send)
