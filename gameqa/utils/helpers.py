"""
Utility helper functions
"""
import uuid
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse


def is_valid_url(url: str) -> bool:
    """
    Check that a string is an absolute http(s) URL.

    Args:
        url: Candidate URL

    Returns:
        True if the URL has an http/https scheme and a host
    """
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def generate_session_id() -> str:
    """Timestamp-prefixed session identifier, unique per run."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{uuid.uuid4().hex[:8]}"


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a number into [low, high]."""
    return max(low, min(high, value))


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add when truncated

    Returns:
        Truncated text
    """
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def timestamp_now() -> str:
    """Get current timestamp as ISO format string."""
    return datetime.now().isoformat()


def parse_timestamp(ts: str) -> Optional[datetime]:
    """Parse an ISO format timestamp string."""
    try:
        return datetime.fromisoformat(ts)
    except (TypeError, ValueError):
        return None
