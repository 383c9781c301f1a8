"""Bounded, retrying calls to external collaborators (store, identity, storage).

Every call the services make to a collaborator goes through ``UpstreamCaller``:
the call runs in a worker thread bounded by a timeout, transient failures are
retried with exponential backoff, and anything that is not already a domain
error is translated into ``UpstreamUnavailable`` / ``UpstreamTimeout``.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, TypeVar

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from claim_tracker.config.settings import get_upstream_config
from claim_tracker.db.store import StoreConflict, StoreError
from claim_tracker.exceptions import ClaimTrackerError, UpstreamTimeout, UpstreamUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transient errors that are worth retrying
RETRYABLE_EXCEPTIONS = (ConnectionError, TimeoutError, OSError, StoreError)


def with_upstream_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 5.0,
    multiplier: float = 1.0,
):
    """Decorator that retries a function with exponential backoff on transient failures.

    Args:
        max_attempts: Maximum number of attempts (default 3).
        min_wait: Minimum wait between retries in seconds (default 0.5).
        max_wait: Maximum wait between retries in seconds (default 5).
        multiplier: Base multiplier for exponential backoff (default 1).
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
            retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
            reraise=True,
        )
        def wrapper(*args, **kwargs) -> T:
            return func(*args, **kwargs)

        return wrapper

    return decorator


def run_with_timeout(func: Callable[..., T], timeout: float, *args: Any, **kwargs: Any) -> T:
    """Run func in a worker thread; raise FutureTimeoutError if it does not finish in time.

    The worker is abandoned (not killed) on timeout.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="upstream")
    try:
        future = executor.submit(func, *args, **kwargs)
        return future.result(timeout=timeout)
    finally:
        executor.shutdown(wait=False)


class UpstreamCaller:
    """Single wrapper for every call to an external collaborator."""

    def __init__(
        self,
        timeout: float | None = None,
        max_attempts: int | None = None,
        min_wait: float | None = None,
        max_wait: float | None = None,
    ):
        config = get_upstream_config()
        self.timeout = float(timeout if timeout is not None else config["timeout"])
        self.max_attempts = int(max_attempts if max_attempts is not None else config["max_attempts"])
        self.min_wait = float(min_wait if min_wait is not None else config["min_wait"])
        self.max_wait = float(max_wait if max_wait is not None else config["max_wait"])

    def call(
        self,
        operation: str,
        func: Callable[..., T],
        *args: Any,
        timeout: float | None = None,
        on_conflict: ClaimTrackerError | None = None,
        **kwargs: Any,
    ) -> T:
        """Call func(*args, **kwargs) within timeout (caller-supplied or default).

        Args:
            operation: Name used in logs and error messages.
            timeout: Seconds to wait; defaults to the configured upstream timeout.
            on_conflict: Domain error to raise when the store reports a
                uniqueness conflict (default: UpstreamUnavailable).

        Raises:
            UpstreamTimeout: the call did not complete in time.
            UpstreamUnavailable: the collaborator kept failing, or raised an
                unexpected error (not retried).
            ClaimTrackerError: domain errors raised by func pass through unchanged.
        """
        limit = self.timeout if timeout is None else timeout
        if limit <= 0:
            raise UpstreamTimeout(f"{operation}: timeout must be positive")

        retrying = with_upstream_retry(
            max_attempts=self.max_attempts,
            min_wait=self.min_wait,
            max_wait=self.max_wait,
        )(func)

        try:
            return run_with_timeout(retrying, limit, *args, **kwargs)
        except FutureTimeoutError as e:
            logger.warning("Upstream call %s timed out after %.1fs", operation, limit)
            raise UpstreamTimeout(f"{operation} timed out after {limit:g}s") from e
        except ClaimTrackerError:
            raise
        except StoreConflict as e:
            logger.warning("Upstream call %s conflicted: %s", operation, e)
            if on_conflict is not None:
                raise on_conflict from e
            raise UpstreamUnavailable(f"{operation} conflicted with an existing record") from e
        except RETRYABLE_EXCEPTIONS as e:
            logger.error("Upstream call %s failed: %s", operation, e)
            raise UpstreamUnavailable(f"{operation} failed") from e
        except Exception as e:
            logger.error("Upstream call %s raised %s: %s", operation, type(e).__name__, e)
            raise UpstreamUnavailable(f"{operation} failed") from e
