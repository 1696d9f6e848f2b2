"""Shared fixtures: an importable module of handlers and middleware."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

FIXTURE_MODULE = "mwengine_fixture_app"

_FIXTURE_SOURCE = textwrap.dedent(
    '''
    from starlette.responses import PlainTextResponse

    CALLS = []


    async def index(request):
        CALLS.append("handler")
        return PlainTextResponse("OK")


    def echo(request):
        return request


    def add_header(name, value):
        def wrap(inner):
            async def handler(request):
                response = await inner(request)
                response.headers[name] = value
                return response

            return handler

        return wrap


    def sync_suffix(tag="!"):
        def wrap(inner):
            return lambda request: inner(request) + tag

        return wrap


    def upper(inner):
        return lambda request: inner(request).upper()


    def bracket(request, next_handler):
        return "[" + next_handler(request) + "]"


    async def recovery(request, next_handler):
        try:
            return await next_handler(request)
        except ValueError:
            return PlainTextResponse("recovered", status_code=503)


    async def failing(request):
        raise ValueError("boom")


    def length_of(n):
        size = len(n)
        return lambda inner: (lambda request: inner(request) * size)


    NOT_CALLABLE = 42
    '''
)


@pytest.fixture
def fixture_app(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write the fixture module to *tmp_path*, put it on sys.path, return its name."""
    (tmp_path / f"{FIXTURE_MODULE}.py").write_text(_FIXTURE_SOURCE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, FIXTURE_MODULE, raising=False)
    return FIXTURE_MODULE
