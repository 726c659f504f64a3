"""
Retry policies keyed by error kind
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from pydantic import BaseModel

from .errors import ErrorKind, GameQAError, describe_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """Retry budget and backoff for one error kind."""

    max_retries: int = 0
    base_delay: float = 0.0  # seconds
    backoff: str = "none"  # none, linear, exponential
    factor: float = 2.0

    class Config:
        frozen = True

    def delay_for(self, attempt: int) -> float:
        """
        Delay before the retry that follows a failed attempt.

        Args:
            attempt: Zero-based index of the attempt that just failed

        Returns:
            Delay in seconds
        """
        if self.backoff == "exponential":
            return self.base_delay * (self.factor ** attempt)
        if self.backoff == "linear":
            return self.base_delay
        return 0.0


RETRY_POLICIES: Dict[ErrorKind, RetryPolicy] = {
    ErrorKind.BROWSER_CRASH: RetryPolicy(max_retries=2, base_delay=5.0, backoff="linear"),
    ErrorKind.API_FAILURE: RetryPolicy(max_retries=2, base_delay=2.0, backoff="exponential", factor=2),
    ErrorKind.NETWORK_ERROR: RetryPolicy(max_retries=3, base_delay=3.0, backoff="linear"),
    ErrorKind.TIMEOUT: RetryPolicy(max_retries=1, base_delay=1.0, backoff="linear"),
    ErrorKind.LLM_FAILURE: RetryPolicy(max_retries=2, base_delay=2.0, backoff="exponential", factor=2),
    ErrorKind.VALIDATION_ERROR: RetryPolicy(),
    ErrorKind.SCREENSHOT_FAILURE: RetryPolicy(),
    ErrorKind.FATAL: RetryPolicy(),
}


def get_policy(kind: ErrorKind) -> RetryPolicy:
    """Look up the retry policy for an error kind."""
    return RETRY_POLICIES[kind]


async def retry_with_classification(
    op: Callable[[], Awaitable[T]],
    kind: ErrorKind,
    max_retries: Optional[int] = None
) -> T:
    """
    Run an async operation under the retry policy of the given kind.

    Failures of ``op`` count as ``kind``. A GameQAError that was already
    classified as a different kind propagates at once.

    Args:
        op: Zero-argument coroutine factory
        kind: Classification applied to failures of ``op``
        max_retries: Optional cap; can only lower the policy budget

    Returns:
        Result of the first successful attempt

    Raises:
        GameQAError: The last failure once the budget is exhausted
    """
    policy = get_policy(kind)
    budget = policy.max_retries
    if max_retries is not None:
        budget = max(0, min(budget, max_retries))

    last_error: Optional[BaseException] = None

    for attempt in range(budget + 1):
        try:
            return await op()
        except GameQAError as e:
            if e.kind is not kind:
                raise
            last_error = e
        except Exception as e:
            last_error = e

        if attempt < budget:
            delay = policy.delay_for(attempt)
            logger.warning(
                f"{kind.value}: retry {attempt + 1}/{budget} in {delay:.1f}s "
                f"({describe_error(last_error)})"
            )
            await asyncio.sleep(delay)
        else:
            logger.warning(
                f"{kind.value}: giving up after {attempt + 1} attempt(s) "
                f"({describe_error(last_error)})"
            )

    if isinstance(last_error, GameQAError):
        raise last_error
    raise GameQAError(kind, describe_error(last_error)) from last_error
