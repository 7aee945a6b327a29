"""Telemetry hook interfaces for viewport recomputation diagnostics."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from threading import Lock
from typing import Literal, Protocol

from .window import VisibleRange


@dataclass(frozen=True, slots=True)
class TelemetrySignal:
    """Common base of every diagnostic signal raised by a virtual list."""

    emitted_at: datetime = field(init=False)

    def __post_init__(self) -> None:
        """Record the UTC creation time on the frozen instance."""
        object.__setattr__(self, "emitted_at", datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class TelemetryEvent(TelemetrySignal):
    """Something that happened once, such as a range move."""


@dataclass(frozen=True, slots=True)
class TelemetryMetric(TelemetrySignal):
    """A sample counted or aggregated by sinks."""


@dataclass(frozen=True, slots=True)
class RecomputeMetric(TelemetryMetric):
    """Metric emitted for every visible range recomputation."""

    scroll_offset: float
    item_count: int
    changed: bool


@dataclass(frozen=True, slots=True)
class RangeChangedEvent(TelemetryEvent):
    """Event emitted when a recomputation produced a different visible range."""

    previous: VisibleRange | None
    current: VisibleRange
    item_count: int


@dataclass(frozen=True, slots=True)
class ListenerEvent(TelemetryEvent):
    """Event emitted when a component attaches to or detaches from a scroll surface."""

    action: Literal["attached", "detached"]
    scroll_offset: float


class TelemetrySink(Protocol):
    """Destination for the signals a virtual list produces."""

    def record_event(self, event: TelemetryEvent) -> None:  # pragma: no cover - protocol
        """Accept *event*."""
        ...

    def record_metric(self, metric: TelemetryMetric) -> None:  # pragma: no cover - protocol
        """Accept *metric*."""
        ...


class NullTelemetrySink(TelemetrySink):
    """Default sink used when the caller supplies none."""

    def record_event(self, event: TelemetryEvent) -> None:
        """Discard *event*."""

    def record_metric(self, metric: TelemetryMetric) -> None:
        """Discard *metric*."""


@dataclass(frozen=True, slots=True)
class TelemetrySnapshot:
    """Immutable view of the signals buffered by :class:`RecordingTelemetrySink`."""

    generated_at: datetime
    recomputations: int
    range_changes: int
    recent_ranges: list[RangeChangedEvent]
    listener_events: list[ListenerEvent]


class RecordingTelemetrySink(TelemetrySink):
    """Thread-safe sink counting recomputations and retaining recent events."""

    def __init__(self, *, history: int = 100) -> None:
        """Keep at most *history* range and listener events."""
        self._recomputations = 0
        self._range_changes = 0
        self._ranges: deque[RangeChangedEvent] = deque(maxlen=history)
        self._listener_events: deque[ListenerEvent] = deque(maxlen=history)
        self._lock = Lock()

    def record_event(self, event: TelemetryEvent) -> None:
        """Buffer range and listener events."""
        with self._lock:
            if isinstance(event, RangeChangedEvent):
                self._range_changes += 1
                self._ranges.append(event)
            elif isinstance(event, ListenerEvent):
                self._listener_events.append(event)

    def record_metric(self, metric: TelemetryMetric) -> None:
        """Count recomputation samples."""
        with self._lock:
            if isinstance(metric, RecomputeMetric):
                self._recomputations += 1

    def snapshot(self) -> TelemetrySnapshot:
        """Return an immutable snapshot of the counters and buffers."""
        with self._lock:
            return TelemetrySnapshot(
                generated_at=datetime.now(UTC),
                recomputations=self._recomputations,
                range_changes=self._range_changes,
                recent_ranges=list(self._ranges),
                listener_events=list(self._listener_events),
            )
