"""Per-source call telemetry and circuit breaking for search fan-out."""

from __future__ import annotations

import json
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, DefaultDict

logger = logging.getLogger("cinevault.ingestion")


class CircuitOpenError(Exception):
    """Raised when a source is cooling down and must be skipped."""


@dataclass
class SourceCircuit:
    """Consecutive-failure counter with a doubling cooldown window."""
    threshold: int = 3
    base_backoff_seconds: float = 15.0
    max_backoff_seconds: float = 300.0
    clock: Callable[[], float] = time.monotonic
    failure_streak: int = 0
    open_until: float = 0.0
    current_backoff: float = field(init=False)
    opened_count: int = 0

    def __post_init__(self) -> None:
        self.current_backoff = self.base_backoff_seconds

    def is_open(self) -> bool:
        return self.clock() < self.open_until

    def remaining_cooldown(self) -> float:
        return max(0.0, self.open_until - self.clock())

    def record_success(self) -> None:
        self.failure_streak = 0
        self.open_until = 0.0
        self.current_backoff = self.base_backoff_seconds

    def record_failure(self) -> None:
        """Count a failed call; open the circuit once the streak reaches the threshold."""
        self.failure_streak += 1
        if self.failure_streak < self.threshold:
            return
        self.open_until = self.clock() + self.current_backoff
        self.failure_streak = 0
        self.opened_count += 1
        self.current_backoff = min(self.current_backoff * 2, self.max_backoff_seconds)

    def snapshot(self) -> dict[str, Any]:
        return {
            "failure_streak": self.failure_streak,
            "remaining_cooldown": round(self.remaining_cooldown(), 2),
            "current_backoff": self.current_backoff,
            "opened_count": self.opened_count,
        }


@dataclass
class SourceCounters:
    started: int = 0
    succeeded: int = 0
    empty: int = 0
    failed: int = 0
    skipped: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None


class SourceMonitor:
    """Track search calls per source and stop calling sources that keep failing.

    A call whose result is ``None`` (the fetch wrapper's "absent") counts as a
    failure for circuit purposes, as does a raised exception. The exception is
    re-raised after it is recorded so the caller decides how to degrade.
    """

    def __init__(
        self,
        *,
        circuit_threshold: int = 3,
        base_backoff_seconds: float = 15.0,
        max_backoff_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._counters: DefaultDict[str, SourceCounters] = defaultdict(SourceCounters)
        self._circuits: DefaultDict[str, SourceCircuit] = defaultdict(
            lambda: SourceCircuit(
                threshold=circuit_threshold,
                base_backoff_seconds=base_backoff_seconds,
                max_backoff_seconds=max_backoff_seconds,
                clock=clock,
            )
        )

    def allow_call(self, source: str) -> bool:
        return not self._circuits[source].is_open()

    def record_skip(self, source: str, *, reason: str, context: dict[str, Any] | None = None) -> None:
        self._counters[source].skipped += 1
        self._emit(logging.WARNING, "source_skip", source, context or {}, reason=reason)

    async def track(
        self,
        source: str,
        func: Callable[[], Awaitable[Any]],
        *,
        context: dict[str, Any] | None = None,
    ) -> Any:
        context = context or {}
        circuit = self._circuits[source]
        counters = self._counters[source]
        if circuit.is_open():
            remaining = circuit.remaining_cooldown()
            self.record_skip(source, reason="circuit_open", context=context)
            raise CircuitOpenError(f"{source} circuit open for {remaining:.2f}s")

        counters.started += 1
        start = self._clock()
        try:
            result = await func()
        except Exception as exc:  # noqa: BLE001
            self._record_failure(source, start, str(exc) or exc.__class__.__name__, context)
            raise

        if result is None:
            self._record_failure(source, start, "no payload", context)
            return None

        latency_ms = (self._clock() - start) * 1000
        counters.succeeded += 1
        if not result:
            counters.empty += 1
        counters.last_latency_ms = latency_ms
        counters.last_error = None
        circuit.record_success()
        self._emit(logging.INFO, "source_success", source, context, latency_ms=round(latency_ms, 2), hits=len(result))
        return result

    def _record_failure(self, source: str, start: float, error: str, context: dict[str, Any]) -> None:
        latency_ms = (self._clock() - start) * 1000
        counters = self._counters[source]
        counters.failed += 1
        counters.last_latency_ms = latency_ms
        counters.last_error = error
        self._circuits[source].record_failure()
        self._emit(logging.WARNING, "source_failure", source, context, error=error, latency_ms=round(latency_ms, 2))

    def _emit(self, level: int, event: str, source: str, context: dict[str, Any], **extra: Any) -> None:
        payload = {
            "event": event,
            "source": source,
            "context": context,
            **extra,
            "circuit": self._circuits[source].snapshot(),
        }
        logger.log(level, json.dumps(payload, default=str))

    def snapshot(self) -> dict[str, Any]:
        return {
            source: {
                "circuit": self._circuits[source].snapshot(),
                "calls": {
                    "started": counters.started,
                    "succeeded": counters.succeeded,
                    "empty": counters.empty,
                    "failed": counters.failed,
                    "skipped": counters.skipped,
                    "last_latency_ms": counters.last_latency_ms,
                    "last_error": counters.last_error,
                },
            }
            for source, counters in self._counters.items()
        }
