"""
middlengine - compose an ordered chain of middleware around a request handler.

Register wrappers on an :class:`~middlengine.engine.Engine` in outer-to-inner
order, compose once, then dispatch requests through the resulting chain.
"""

from middlengine.constants import PROJECT_NAME, PROJECT_VERSION
from middlengine.engine import (
    Engine,
    EngineState,
    Handler,
    Middleware,
    NextStyleMiddleware,
    adapt_next_style,
    build_chain,
)
from middlengine.errors import (
    ConfigurationError,
    EngineStateError,
    MiddlengineError,
    ReferenceResolutionError,
)

__version__ = PROJECT_VERSION
__app_name__ = PROJECT_NAME

__all__ = [
    "ConfigurationError",
    "Engine",
    "EngineState",
    "EngineStateError",
    "Handler",
    "Middleware",
    "MiddlengineError",
    "NextStyleMiddleware",
    "ReferenceResolutionError",
    "adapt_next_style",
    "build_chain",
    "__version__",
    "__app_name__",
]
