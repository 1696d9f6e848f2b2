"""
Defines project-specific exception classes.
"""
from typing import Optional


class MiddlengineError(Exception):
    """Base class for all custom exceptions in middlengine."""
    pass


class ConfigurationError(MiddlengineError):
    """
    Raised when the engine or its configuration file is unusable.

    This is a programmer or operator error (no base handler, a wrapper that
    returns nothing, an invalid config file). It is never caught or retried
    inside the library.
    """
    pass


class EngineStateError(MiddlengineError):
    """Raised when an operation is not allowed in the engine's current state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(
            f"Cannot {operation} in state '{state}': the middleware chain is "
            "already composed. Build a new Engine to change the chain.")


class ReferenceResolutionError(ConfigurationError):
    """
    Raised when a ``module:attribute`` reference from the configuration
    cannot be imported or looked up.
    """

    def __init__(self,
                 ref: str,
                 message: str,
                 orig_exc: Optional[Exception] = None):
        self.ref = ref
        self.orig_exc = orig_exc

        full_msg = f"Cannot resolve '{ref}': {message}"
        if orig_exc:
            full_msg += f" (original error: {type(orig_exc).__name__})"
        super().__init__(full_msg)
