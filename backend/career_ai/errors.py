"""
Failure taxonomy for calls against the local inference server.

These exceptions never leave the service: they are raised by the low-level
helpers and turned into failure values where they are caught.
"""
from typing import Any, Optional

from .schemas import CompletionFailure, ErrorType


class LlamaServiceError(Exception):
    error_type: ErrorType = "internal"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_failure(self) -> CompletionFailure:
        return CompletionFailure(error=self.message, error_type=self.error_type, details=self.details)


class TransportError(LlamaServiceError):
    """Network failure, timeout or non-2xx status from the server."""
    error_type: ErrorType = "transport"


class UpstreamShapeError(LlamaServiceError):
    """The server answered but the body lacks the expected fields."""
    error_type: ErrorType = "upstream_shape"


class ParseError(LlamaServiceError):
    """Assistant content was expected to be JSON and is not."""
    error_type: ErrorType = "parse"
