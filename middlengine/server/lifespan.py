"""Application lifespan: freeze the engine before the first request."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from starlette.applications import Starlette

from middlengine.constants import PROJECT_NAME, PROJECT_VERSION
from middlengine.engine import Engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: Starlette) -> AsyncIterator[None]:
    """Compose the engine on startup if the host has not done so yet."""
    engine: Engine = app.state.engine
    logger.info("%s v%s starting up.", PROJECT_NAME, PROJECT_VERSION)
    if not engine.composed:
        engine.compose()
    logger.info("Serving chain: %s", " -> ".join(engine.describe()))
    try:
        yield
    finally:
        logger.info("%s shutting down.", PROJECT_NAME)
