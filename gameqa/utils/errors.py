"""
Error taxonomy and classification
"""
import asyncio
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError


class ErrorKind(str, Enum):
    """Fixed set of failure kinds. Each kind has its own retry policy."""

    BROWSER_CRASH = "BROWSER_CRASH"
    API_FAILURE = "API_FAILURE"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SCREENSHOT_FAILURE = "SCREENSHOT_FAILURE"
    LLM_FAILURE = "LLM_FAILURE"
    FATAL = "FATAL"


class GameQAError(Exception):
    """
    Application error carrying its classification.

    Args:
        kind: Error kind used to pick a retry policy
        message: Human-readable description
        context: Optional extra details for logging
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = context or {}

    def __repr__(self):
        return f"<{self.__class__.__name__}(kind={self.kind.value}, message={self.message!r})>"


class ConfigurationError(GameQAError):
    """Raised before a session starts when settings are unusable."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorKind.VALIDATION_ERROR, message, context)


def classify_error(error: BaseException) -> ErrorKind:
    """
    Map any exception to an ErrorKind.

    Args:
        error: The exception to classify

    Returns:
        The matching ErrorKind, FATAL when nothing more specific applies
    """
    if isinstance(error, GameQAError):
        return error.kind
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorKind.NETWORK_ERROR
    if isinstance(error, (ValidationError, ValueError)):
        return ErrorKind.VALIDATION_ERROR
    return ErrorKind.FATAL


def describe_error(error: BaseException) -> str:
    """Short message for an exception, falling back to its type name."""
    message = str(error).strip()
    return message or error.__class__.__name__
