"""Utilities package"""
from .helpers import is_valid_url, generate_session_id, clamp, truncate_text, timestamp_now
from .errors import ErrorKind, GameQAError, ConfigurationError, classify_error
from .retry import RetryPolicy, RETRY_POLICIES, retry_with_classification

__all__ = [
    "is_valid_url",
    "generate_session_id",
    "clamp",
    "truncate_text",
    "timestamp_now",
    "ErrorKind",
    "GameQAError",
    "ConfigurationError",
    "classify_error",
    "RetryPolicy",
    "RETRY_POLICIES",
    "retry_with_classification",
]
