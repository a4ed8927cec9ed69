"""Unit tests for the collaborator executor.

Tests cover:
1. Timeout behavior
2. Read retries with jitter, single-attempt writes
3. Domain errors pass through without retry
4. Metrics and log wiring
"""

import asyncio
from typing import Any

import pytest
from prometheus_client import REGISTRY

from backend.planner.collaborators.executor import (
    CallConfig,
    CallContext,
    CallLogger,
    CollaboratorCallError,
    CollaboratorExecutor,
    CollaboratorTimeoutError,
)
from backend.planner.errors import InvalidReference, StorageFailure
from backend.planner.utils.metrics import PrometheusCallMetrics

CTX = CallContext(collaborator="persistence", operation="get_trip")


def make_config(**overrides: int) -> CallConfig:
    values = {
        "timeout_ms": 100,
        "retry_count": 1,
        "retry_jitter_min_ms": 200,
        "retry_jitter_max_ms": 500,
    }
    values.update(overrides)
    return CallConfig(**values)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class RecordingLogger(CallLogger):
    def __init__(self) -> None:
        self.attempts: list[tuple[int, str, str | None]] = []

    def log_attempt(
        self,
        ctx: CallContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        self.attempts.append((attempt, outcome, error_reason))


class FlakyCall:
    """Fails `failures` times with `error`, then returns `value`."""

    def __init__(self, failures: int, error: Exception, value: Any = "ok") -> None:
        self.failures = failures
        self.error = error
        self.value = value
        self.calls = 0

    async def __call__(self, *args: Any) -> Any:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


class TestReads:
    """Test read (retried) calls."""

    @pytest.mark.asyncio
    async def test_success_first_try(self) -> None:
        call = FlakyCall(failures=0, error=RuntimeError())
        executor = CollaboratorExecutor(make_config(), sleep_fn=RecordingSleep())

        assert await executor.read(CTX, call) == "ok"
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_retries_once_with_jitter(self) -> None:
        sleep = RecordingSleep()
        call = FlakyCall(failures=1, error=StorageFailure("blip"))
        executor = CollaboratorExecutor(make_config(), sleep_fn=sleep)

        assert await executor.read(CTX, call) == "ok"
        assert call.calls == 2
        assert len(sleep.calls) == 1
        assert 0.2 <= sleep.calls[0] <= 0.5

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_call_error(self) -> None:
        call = FlakyCall(failures=5, error=ConnectionError("refused"))
        executor = CollaboratorExecutor(make_config(retry_count=2), sleep_fn=RecordingSleep())

        with pytest.raises(CollaboratorCallError) as exc_info:
            await executor.read(CTX, call)

        assert call.calls == 3
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        async def slow() -> str:
            await asyncio.sleep(1)
            return "late"

        executor = CollaboratorExecutor(
            make_config(timeout_ms=10, retry_count=1), sleep_fn=RecordingSleep()
        )

        with pytest.raises(CollaboratorTimeoutError):
            await executor.read(CTX, slow)

    @pytest.mark.asyncio
    async def test_domain_error_is_not_retried(self) -> None:
        call = FlakyCall(failures=5, error=InvalidReference("trip", "t1"))
        executor = CollaboratorExecutor(make_config(retry_count=3), sleep_fn=RecordingSleep())

        with pytest.raises(InvalidReference):
            await executor.read(CTX, call)

        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_arguments_are_forwarded(self) -> None:
        async def echo(a: int, b: int) -> int:
            return a + b

        executor = CollaboratorExecutor(make_config())

        assert await executor.read(CTX, echo, 2, 3) == 5


class TestWrites:
    """Test write (single attempt) calls."""

    @pytest.mark.asyncio
    async def test_write_is_not_retried(self) -> None:
        sleep = RecordingSleep()
        call = FlakyCall(failures=1, error=StorageFailure("rejected"))
        executor = CollaboratorExecutor(make_config(retry_count=3), sleep_fn=sleep)

        with pytest.raises(CollaboratorCallError):
            await executor.write(CTX, call)

        assert call.calls == 1
        assert sleep.calls == []


class TestObservability:
    """Test metrics and logging hooks."""

    @pytest.mark.asyncio
    async def test_logger_sees_each_attempt(self) -> None:
        logger = RecordingLogger()
        call = FlakyCall(failures=1, error=StorageFailure("blip"))
        executor = CollaboratorExecutor(make_config(), logger=logger, sleep_fn=RecordingSleep())

        await executor.read(CTX, call)

        assert logger.attempts == [(1, "error", "StorageFailure"), (2, "success", None)]

    @pytest.mark.asyncio
    async def test_prometheus_error_counter(self) -> None:
        labels = {"collaborator": "persistence", "reason": "execution_error"}
        before = REGISTRY.get_sample_value("collaborator_errors_total", labels) or 0.0

        call = FlakyCall(failures=1, error=StorageFailure("blip"))
        executor = CollaboratorExecutor(
            make_config(), metrics=PrometheusCallMetrics(), sleep_fn=RecordingSleep()
        )
        await executor.read(CTX, call)

        after = REGISTRY.get_sample_value("collaborator_errors_total", labels)
        assert after == before + 1
