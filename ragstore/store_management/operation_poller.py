"""
Operation poller for long-running ingestion operations.

Turns the backend's "accepted" response into a synchronous completion
contract: the caller awaits until the operation is done or has failed.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    stop_never,
    wait_exponential,
    wait_fixed,
)

from ragstore.config.settings import Settings
from ragstore.utils.error_handlers import IngestionFailedError, OperationTimeoutError

logger = structlog.get_logger(__name__)


def is_pending(operation: Any) -> bool:
    """An operation keeps being polled until it is done or reports an error."""
    return not (getattr(operation, 'done', False) or getattr(operation, 'error', None))


@dataclass
class PollResult:
    """Outcome of polling one operation to completion."""
    operation: Any
    poll_count: int
    elapsed: float


class OperationPoller:
    """
    Poll a long-running operation to completion.

    Between status checks the poller waits a fixed interval, or an
    exponentially growing one when backoff is enabled. Without a maximum
    attempt count polling is unbounded. Transport errors raised by the status
    fetch are not retried. Cancelling the awaiting task interrupts the wait
    and propagates CancelledError.

    The poller holds no per-operation state, so one instance can drive any
    number of concurrent operations.
    """

    def __init__(
        self,
        fetch_status: Callable[[Any], Awaitable[Any]],
        interval_seconds: float = 3.0,
        max_attempts: Optional[int] = None,
        backoff_enabled: bool = False,
        max_interval_seconds: float = 30.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        """
        Initialize the poller.

        Args:
            fetch_status: Coroutine function re-fetching an operation
            interval_seconds: Wait before each status check
            max_attempts: Maximum number of status checks (None for unbounded)
            backoff_enabled: Grow the wait exponentially between checks
            max_interval_seconds: Upper bound for the wait when backoff is enabled
            sleep: Awaitable sleep used between checks (asyncio.sleep by default)
        """
        self.fetch_status = fetch_status
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts
        self.backoff_enabled = backoff_enabled
        self.max_interval_seconds = max_interval_seconds
        self._sleep = sleep or asyncio.sleep
        self.logger = logger.bind(
            log_type="SYSTEM",
            component="operation_poller"
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        fetch_status: Callable[[Any], Awaitable[Any]],
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ) -> 'OperationPoller':
        """Create a poller using the polling policy from settings."""
        return cls(
            fetch_status=fetch_status,
            interval_seconds=settings.poll_interval_seconds,
            max_attempts=settings.poll_max_attempts,
            backoff_enabled=settings.poll_backoff_enabled,
            max_interval_seconds=settings.poll_max_interval_seconds,
            sleep=sleep
        )

    def _wait_strategy(self):
        if self.backoff_enabled:
            return wait_exponential(
                multiplier=self.interval_seconds,
                min=self.interval_seconds,
                max=max(self.interval_seconds, self.max_interval_seconds)
            )
        return wait_fixed(self.interval_seconds)

    def _stop_strategy(self):
        if self.max_attempts is None:
            return stop_never
        # Attempt one inspects the submitted operation without fetching
        return stop_after_attempt(self.max_attempts + 1)

    async def wait_for_completion(self, operation: Any, store_name: Optional[str] = None) -> PollResult:
        """
        Poll until the operation is done.

        Args:
            operation: The just-started operation
            store_name: Target store, recorded in logs and error context

        Returns:
            PollResult with the final operation and the number of status fetches

        Raises:
            IngestionFailedError: The operation reported a terminal failure
            OperationTimeoutError: max_attempts status checks passed without completion
            TransportError: A status fetch failed
        """
        operation_name = getattr(operation, 'name', None)
        start_time = time.time()
        current = operation
        fetches = 0
        inspected = False

        async def check() -> Any:
            nonlocal current, fetches, inspected
            if not inspected:
                inspected = True
                return current

            current = await self.fetch_status(current)
            fetches += 1
            self.logger.debug(
                "Operation status checked",
                operation_name=operation_name,
                poll_count=fetches,
                done=bool(getattr(current, 'done', False))
            )
            return current

        def give_up(retry_state: RetryCallState) -> Any:
            self.logger.warning(
                "Operation still running after maximum status checks",
                operation_name=operation_name,
                store_name=store_name,
                poll_count=fetches
            )
            raise OperationTimeoutError(
                f"Operation {operation_name} did not complete after {fetches} status checks",
                operation_name=operation_name,
                attempts=fetches
            )

        retrying = AsyncRetrying(
            retry=retry_if_result(is_pending),
            wait=self._wait_strategy(),
            stop=self._stop_strategy(),
            sleep=self._sleep,
            retry_error_callback=give_up
        )

        final = await retrying(check)
        elapsed = time.time() - start_time

        error = getattr(final, 'error', None)
        if error:
            self.logger.error(
                "Operation failed",
                operation_name=operation_name,
                store_name=store_name,
                poll_count=fetches,
                error=str(error)
            )
            raise IngestionFailedError(
                f"Ingestion failed: {self._describe_error(error)}",
                operation_name=operation_name,
                store_name=store_name,
                detail=error
            )

        self.logger.info(
            "Operation completed",
            operation_name=operation_name,
            store_name=store_name,
            poll_count=fetches,
            processing_time=elapsed
        )
        return PollResult(operation=final, poll_count=fetches, elapsed=elapsed)

    @staticmethod
    def _describe_error(error: Any) -> str:
        if isinstance(error, dict):
            return str(error.get('message') or error)
        return str(getattr(error, 'message', None) or error)
