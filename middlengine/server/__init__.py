"""ASGI hosting for a middlengine :class:`~middlengine.engine.Engine`."""

from middlengine.server.app import create_app
from middlengine.server.endpoint import EngineEndpoint, to_response

__all__ = ["EngineEndpoint", "create_app", "to_response"]
