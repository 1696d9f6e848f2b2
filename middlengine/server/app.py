"""Starlette ASGI application factory."""

import logging

from starlette.applications import Starlette
from starlette.routing import Mount

from middlengine.engine import Engine
from middlengine.server.endpoint import EngineEndpoint
from middlengine.server.lifespan import app_lifespan

logger = logging.getLogger(__name__)


def create_app(engine: Engine, *, debug: bool = False) -> Starlette:
    """Create a Starlette application that serves every path through *engine*.

    The engine is composed during lifespan startup when it is not composed
    already, so all configuration happens before concurrent dispatch.
    """
    application = Starlette(
        debug=debug,
        lifespan=app_lifespan,
        routes=[Mount("/", app=EngineEndpoint(engine))],
    )
    application.state.engine = engine
    logger.info("Starlette ASGI app created for %r.", engine)
    return application
