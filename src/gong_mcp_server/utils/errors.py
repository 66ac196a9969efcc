"""Error handling for the Gong MCP server.

Every failure that crosses a module boundary is an ``MCPServerError``
carrying an ``ErrorCode``. Upstream HTTP statuses are mapped to codes here,
and the codes decide whether ``retry_on_error`` tries again.
"""

import asyncio
import logging
from enum import Enum
from functools import wraps
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Error codes surfaced to MCP clients."""

    INVALID_INPUT = "INVALID_INPUT"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    GONG_API_ERROR = "GONG_API_ERROR"
    GONG_AUTH_ERROR = "GONG_AUTH_ERROR"
    GONG_NOT_CONFIGURED = "GONG_NOT_CONFIGURED"


# Retrying cannot change the outcome for these
NON_RETRYABLE_CODES = frozenset(
    {
        ErrorCode.INVALID_INPUT,
        ErrorCode.RESOURCE_NOT_FOUND,
        ErrorCode.GONG_AUTH_ERROR,
        ErrorCode.GONG_NOT_CONFIGURED,
    }
)


def error_code_for_status(status_code: int) -> ErrorCode:
    """Map an HTTP status returned by Gong to an error code.

    401 and 403 both mean the access key pair was rejected; other 4xx
    statuses mean the request itself was bad.
    """
    if status_code in (401, 403):
        return ErrorCode.GONG_AUTH_ERROR
    if status_code == 404:
        return ErrorCode.RESOURCE_NOT_FOUND
    if status_code == 429:
        return ErrorCode.RATE_LIMIT
    if 400 <= status_code < 500:
        return ErrorCode.INVALID_INPUT
    return ErrorCode.GONG_API_ERROR


class MCPServerError(Exception):
    """Exception raised by the server, its services, and the Gong client."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize the error.

        Args:
            message: Human-readable message, shown to the MCP client as-is
            error_code: Error classification
            details: Structured context for logs (endpoint, status, ...)
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def is_retryable(self) -> bool:
        return self.error_code not in NON_RETRYABLE_CODES

    @property
    def retry_after(self) -> Optional[float]:
        """Seconds Gong asked us to wait, if it sent a Retry-After value."""
        value = self.details.get("retry_after")
        if value is None:
            return None
        try:
            return max(float(value), 0.0)
        except (TypeError, ValueError):
            return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging or JSON responses."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


def retry_on_error(
    max_retries: int = 3, delay: float = 1.0, backoff: float = 2.0
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Retry an async callable on transient failures.

    Errors whose code is in ``NON_RETRYABLE_CODES`` propagate on the first
    attempt. When a rate-limited error carries ``retry_after``, the wait is
    at least that long.

    Args:
        max_retries: Total number of attempts
        delay: Wait before the second attempt, in seconds
        backoff: Multiplier applied to the wait after each attempt

    Returns:
        Decorator applying the retry policy
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            last_exception: Optional[Exception] = None

            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)

                except Exception as e:
                    if isinstance(e, MCPServerError) and not e.is_retryable:
                        raise

                    last_exception = e
                    if attempt == max_retries - 1:
                        logger.error(
                            f"{func.__name__} failed after {max_retries} attempts",
                            extra={"function": func.__name__, "error": str(e)},
                        )
                        break

                    wait_time = delay * (backoff**attempt)
                    if isinstance(e, MCPServerError) and e.retry_after is not None:
                        wait_time = max(wait_time, e.retry_after)

                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1} failed, retrying in {wait_time}s",
                        extra={
                            "function": func.__name__,
                            "error": str(e),
                            "attempt": attempt + 1,
                        },
                    )
                    await asyncio.sleep(wait_time)

            if last_exception:
                raise last_exception

        return wrapper

    return decorator
