"""Retry executor with exponential backoff for adapter requests."""

import asyncio
from typing import Any, Awaitable, Callable, Optional
import structlog

from ..common.metrics import MetricsCollector
from .types import RetryPolicy


def retry_always(error: Exception) -> bool:
    """Default retry predicate: every failure is retryable."""
    return True


class RetryExecutor:
    """Runs a single operation under a bounded, deterministic backoff.

    The delay before retry ``k`` is ``initial * multiplier**k`` capped at
    ``max_delay_ms``. There is no jitter.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        is_retryable: Callable[[Exception], bool] = retry_always,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: Optional[Any] = None,
        metrics: Optional[MetricsCollector] = None,
        name: str = "adapter"
    ):
        """Configure the executor.

        Parameters
        - policy: Retry bounds and backoff shape
        - is_retryable: Predicate deciding whether a failure may be retried
        - sleep: Awaitable sleep taking seconds; injectable for tests
        - logger: structlog-style logger with ``bind``; defaults to ``retry_executor``
        - metrics: Optional collector receiving one count per retry
        - name: Adapter name used in logs and metric labels
        """
        self.policy = policy
        self.is_retryable = is_retryable
        self.sleep = sleep
        self.logger = logger or structlog.get_logger("retry_executor")
        self.metrics = metrics
        self.name = name

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[Any]],
        operation_name: str = "request"
    ) -> Any:
        """Run ``operation`` until it succeeds or the policy is exhausted.

        The error of the final attempt is re-raised; earlier errors are
        discarded. Errors rejected by ``is_retryable`` are re-raised at once.
        """
        log = self.logger.bind(adapter=self.name, operation=operation_name)
        delay = self.policy.initial_delay_ms
        max_retries = self.policy.max_retries

        for attempt in range(max_retries + 1):
            try:
                result = await operation()
            except Exception as e:
                if attempt >= max_retries or not self.is_retryable(e):
                    if attempt > 0:
                        log.error(
                            "Operation failed after retries",
                            attempts=attempt + 1,
                            error=str(e)
                        )
                    raise

                log.warning(
                    f"Retry attempt {attempt + 1}",
                    delay_ms=delay,
                    error=str(e)
                )
                if self.metrics is not None:
                    self.metrics.record_retry(self.name)

                await self.sleep(delay / 1000.0)
                delay = min(delay * self.policy.backoff_multiplier, self.policy.max_delay_ms)
                continue

            if attempt > 0:
                log.info(
                    "Operation succeeded after retry",
                    attempt=attempt + 1
                )
            return result

        # range() always runs at least once and every path above returns or raises
        raise RuntimeError("Retry logic error")
