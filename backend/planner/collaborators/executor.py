"""Async executor for calls to external collaborators.

Every persistence and geocoding call goes through here:
- Hard timeout per attempt
- Idempotent reads get a fixed retry budget with jittered back-off
- Writes get exactly one attempt (no dedupe key exists to retry them safely)
- Domain errors (ItineraryError other than StorageFailure) pass through untouched
- Metrics and structured logging per attempt
"""

import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from backend.planner.config import Settings
from backend.planner.errors import ItineraryError, StorageFailure

T = TypeVar("T")


class CollaboratorTimeoutError(Exception):
    """Collaborator call exceeded its timeout on every attempt."""

    pass


class CollaboratorCallError(Exception):
    """Collaborator call failed on every attempt."""

    pass


@dataclass(frozen=True)
class CallContext:
    """Identifies a collaborator call for metrics and logs."""

    collaborator: str
    operation: str


@dataclass
class CallConfig:
    """Timeout and retry budget for collaborator calls."""

    timeout_ms: int
    retry_count: int
    retry_jitter_min_ms: int
    retry_jitter_max_ms: int

    @classmethod
    def from_settings(cls, settings: Settings) -> "CallConfig":
        """Build config from application settings."""
        return cls(
            timeout_ms=settings.collaborator_timeout_ms,
            retry_count=settings.read_retry_count,
            retry_jitter_min_ms=settings.retry_jitter_min_ms,
            retry_jitter_max_ms=settings.retry_jitter_max_ms,
        )


class CallMetrics:
    """Interface for collaborator call metrics."""

    def record_latency(self, collaborator: str, outcome: str, latency_ms: float) -> None:
        """Record call latency."""
        pass

    def inc_error(self, collaborator: str, reason: str) -> None:
        """Increment error counter."""
        pass


class CallLogger:
    """Interface for structured call logging."""

    def log_attempt(
        self,
        ctx: CallContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log a call attempt."""
        pass


def _is_retryable(error: Exception) -> bool:
    """Domain errors are answers, not outages; only StorageFailure is retried."""
    return not isinstance(error, ItineraryError) or isinstance(error, StorageFailure)


class CollaboratorExecutor:
    """Runs collaborator calls with timeouts and bounded read retries."""

    def __init__(
        self,
        config: CallConfig,
        metrics: CallMetrics | None = None,
        logger: CallLogger | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            config: Timeout and retry budget
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        self._config = config
        self._metrics = metrics or CallMetrics()
        self._logger = logger or CallLogger()
        self._sleep = sleep_fn or asyncio.sleep

    async def read(self, ctx: CallContext, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Execute an idempotent call with the configured retry budget."""
        return await self._execute(ctx, fn, args, attempts=self._config.retry_count + 1)

    async def write(self, ctx: CallContext, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Execute a non-idempotent call exactly once."""
        return await self._execute(ctx, fn, args, attempts=1)

    async def _execute(
        self,
        ctx: CallContext,
        fn: Callable[..., Awaitable[T]],
        args: tuple[Any, ...],
        attempts: int,
    ) -> T:
        """Run fn(*args) up to `attempts` times.

        Raises:
            CollaboratorTimeoutError: Every attempt timed out
            CollaboratorCallError: Every attempt failed (last error chained)
            ItineraryError: Non-retryable domain error raised by fn
        """
        timeout_sec = self._config.timeout_ms / 1000
        last_error: Exception | None = None

        for attempt in range(attempts):
            attempt_start = time.monotonic()

            try:
                result = await asyncio.wait_for(fn(*args), timeout=timeout_sec)

                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                self._metrics.record_latency(ctx.collaborator, "success", elapsed_ms)
                self._logger.log_attempt(ctx, attempt + 1, "success", elapsed_ms)
                return result

            except TimeoutError as e:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                last_error = e
                self._metrics.inc_error(ctx.collaborator, "timeout")
                self._logger.log_attempt(
                    ctx, attempt + 1, "timeout", elapsed_ms, error_reason="timeout"
                )

            except Exception as e:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                if not _is_retryable(e):
                    self._metrics.record_latency(ctx.collaborator, "rejected", elapsed_ms)
                    raise

                last_error = e
                self._metrics.inc_error(ctx.collaborator, "execution_error")
                self._logger.log_attempt(
                    ctx, attempt + 1, "error", elapsed_ms, error_reason=type(e).__name__
                )

            if attempt < attempts - 1:
                jitter_ms = random.uniform(
                    self._config.retry_jitter_min_ms, self._config.retry_jitter_max_ms
                )
                await self._sleep(jitter_ms / 1000)

        if isinstance(last_error, TimeoutError):
            raise CollaboratorTimeoutError(
                f"{ctx.collaborator}.{ctx.operation} timed out after {attempts} attempt(s)"
            )
        raise CollaboratorCallError(
            f"{ctx.collaborator}.{ctx.operation} failed after {attempts} attempt(s)"
        ) from last_error
