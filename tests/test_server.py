"""Tests for the Starlette hosting adapter."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.testclient import TestClient

from middlengine.engine import Engine, EngineState, adapt_next_style
from middlengine.server import create_app, to_response


def add_header(name: str, value: str) -> Callable[[Callable], Callable]:
    def wrap(inner: Callable) -> Callable:
        async def handler(request: Request) -> Response:
            response = await inner(request)
            order = response.headers.get("x-order", "")
            response.headers["x-order"] = f"{order},{name}" if order else name
            response.headers[name] = value
            return response

        return handler

    return wrap


async def ok(request: Request) -> Response:
    return PlainTextResponse("OK")


class TestToResponse:
    def test_response_passthrough(self) -> None:
        resp = PlainTextResponse("x")
        assert to_response(resp) is resp

    def test_none_is_no_content(self) -> None:
        assert to_response(None).status_code == 204

    def test_str_and_bytes(self) -> None:
        assert to_response("hi").body == b"hi"
        assert to_response(b"raw").body == b"raw"

    def test_json(self) -> None:
        resp = to_response({"a": 1})
        assert isinstance(resp, JSONResponse)
        assert resp.body == b'{"a":1}'

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError):
            to_response(object())


class TestCreateApp:
    def test_header_scenario_over_http(self) -> None:
        engine = Engine(ok)
        engine.use(add_header("X", "1"))
        engine.use(add_header("Y", "2"))
        app = create_app(engine)

        with TestClient(app) as client:
            assert engine.state is EngineState.COMPOSED
            resp = client.get("/anything")

        assert resp.status_code == 200
        assert resp.text == "OK"
        assert resp.headers["X"] == "1"
        assert resp.headers["Y"] == "2"
        # B is inside A, so B's header is set first.
        assert resp.headers["x-order"] == "Y,X"

    def test_lifespan_keeps_precomposed_engine(self) -> None:
        engine = Engine(ok)
        engine.compose()
        handler = engine.handler
        with TestClient(create_app(engine)) as client:
            assert client.get("/").text == "OK"
        assert engine.handler is handler

    def test_engine_stored_on_state(self) -> None:
        engine = Engine(ok)
        app = create_app(engine)
        assert app.state.engine is engine

    def test_sync_handler_values_are_coerced(self) -> None:
        def base(request: Request) -> Any:
            return {"path": request.url.path, "method": request.method}

        with TestClient(create_app(Engine(base))) as client:
            resp = client.post("/items/7")
        assert resp.status_code == 200
        assert resp.json() == {"path": "/items/7", "method": "POST"}

    def test_handler_errors_become_500(self) -> None:
        async def failing(request: Request) -> Response:
            raise RuntimeError("boom")

        with TestClient(create_app(Engine(failing)), raise_server_exceptions=False) as client:
            resp = client.get("/")
        assert resp.status_code == 500

    def test_handler_errors_propagate(self) -> None:
        async def failing(request: Request) -> Response:
            raise RuntimeError("boom")

        with TestClient(create_app(Engine(failing))) as client:
            with pytest.raises(RuntimeError, match="boom"):
                client.get("/")

    def test_next_style_middleware_over_http(self) -> None:
        async def recovery(request: Request, next_handler: Callable) -> Response:
            try:
                return await next_handler(request)
            except ValueError:
                return PlainTextResponse("recovered", status_code=503)

        async def failing(request: Request) -> Response:
            raise ValueError("bad")

        engine = Engine(failing)
        engine.use(adapt_next_style(recovery))
        with TestClient(create_app(engine)) as client:
            resp = client.get("/")
        assert resp.status_code == 503
        assert resp.text == "recovered"

    def test_unconfigured_engine_fails_at_startup(self) -> None:
        from middlengine.errors import ConfigurationError

        app = create_app(Engine())
        with pytest.raises(ConfigurationError):
            with TestClient(app):
                pass


class TestMountedApp:
    """A sub-app's lifespan never runs when it is mounted in a parent app."""

    def test_uncomposed_engine_is_refused_when_mounted(self) -> None:
        from starlette.applications import Starlette
        from starlette.routing import Mount

        from middlengine.errors import ConfigurationError

        engine = Engine(ok)
        engine.use(add_header("X", "1"))
        parent = Starlette(routes=[Mount("/api", app=create_app(engine))])

        with TestClient(parent) as client:
            with pytest.raises(ConfigurationError, match="not composed"):
                client.get("/api/x")
        assert engine.state is EngineState.ASSEMBLING

    def test_composed_engine_serves_chain_when_mounted(self) -> None:
        from starlette.applications import Starlette
        from starlette.routing import Mount

        engine = Engine(ok)
        engine.use(add_header("X", "1"))
        engine.compose()
        parent = Starlette(routes=[Mount("/api", app=create_app(engine))])

        with TestClient(parent) as client:
            resp = client.get("/api/x")
        assert resp.status_code == 200
        assert resp.text == "OK"
        assert resp.headers["X"] == "1"

    def test_uncomposed_engine_without_lifespan_is_500(self) -> None:
        engine = Engine(ok)
        engine.use(add_header("X", "1"))
        # No context manager: the lifespan is skipped.
        client = TestClient(create_app(engine), raise_server_exceptions=False)
        resp = client.get("/")
        assert resp.status_code == 500
        assert "X" not in resp.headers
