"""Scroll surface contract and an in-memory reference surface."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Protocol

from .errors import InvalidConfigurationError
from .eventbus import Listener, ListenerRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScrollEvent:
    """Notification emitted when a surface's scroll offset changes."""

    offset: float
    previous: float


class ScrollSurface(Protocol):
    """Protocol implemented by hosts that report scroll position changes."""

    @property
    def scroll_offset(self) -> float:  # pragma: no cover - protocol
        """Return the current scroll offset."""
        ...

    def subscribe(self, listener: Listener[ScrollEvent]) -> None:  # pragma: no cover - protocol
        """Register *listener* for scroll offset changes."""
        ...

    def unsubscribe(self, listener: Listener[ScrollEvent]) -> None:  # pragma: no cover - protocol
        """Remove a previously registered *listener*."""
        ...


@dataclass(frozen=True, slots=True)
class ScrollOutcome:
    """Result of attempting to scroll a surface."""

    handled: bool
    offset: float


class ScrollArea(ScrollSurface):
    """Scrollable region holding content larger than its visible viewport.

    Offsets are clamped to ``[0, max(0, content_size - viewport_size)]`` the way a
    browser or terminal scroll container clamps them. Listeners are notified only
    when the offset actually changes.
    """

    def __init__(
        self,
        *,
        content_size: float,
        viewport_size: float,
        step: float = 1.0,
        offset: float = 0.0,
    ) -> None:
        """Create a surface of *content_size* seen through *viewport_size*."""
        _require_size("viewport_size", viewport_size, allow_zero=False)
        _require_size("content_size", content_size, allow_zero=True)
        _require_size("step", step, allow_zero=False)
        self._content_size = float(content_size)
        self._viewport_size = float(viewport_size)
        self._step = float(step)
        self._listeners: ListenerRegistry[ScrollEvent] = ListenerRegistry("scroll")
        self._offset = self._clamp(offset)

    @property
    def scroll_offset(self) -> float:
        """Return the current (clamped) scroll offset."""
        return self._offset

    @property
    def content_size(self) -> float:
        """Return the full extent of the scrollable content."""
        return self._content_size

    @property
    def viewport_size(self) -> float:
        """Return the visible extent of the surface."""
        return self._viewport_size

    @property
    def max_offset(self) -> float:
        """Return the largest reachable scroll offset."""
        return max(0.0, self._content_size - self._viewport_size)

    @property
    def listener_count(self) -> int:
        """Return the number of attached scroll listeners."""
        return len(self._listeners)

    def subscribe(self, listener: Listener[ScrollEvent]) -> None:
        """Register *listener* for scroll offset changes."""
        self._listeners.subscribe(listener)

    def unsubscribe(self, listener: Listener[ScrollEvent]) -> None:
        """Remove *listener* if attached."""
        self._listeners.unsubscribe(listener)

    def scroll_to(self, offset: float) -> ScrollOutcome:
        """Move to *offset* (clamped) and notify listeners when it changed."""
        target = self._clamp(offset)
        if target == self._offset:
            return ScrollOutcome(handled=False, offset=self._offset)
        previous = self._offset
        self._offset = target
        logger.debug("Scroll offset changed %.1f -> %.1f", previous, target)
        self._listeners.publish(ScrollEvent(offset=target, previous=previous))
        return ScrollOutcome(handled=True, offset=target)

    def scroll_by(self, delta: float) -> ScrollOutcome:
        """Move by *delta* relative to the current offset."""
        return self.scroll_to(self._offset + delta)

    def page_down(self) -> ScrollOutcome:
        """Scroll forward by one viewport."""
        return self.scroll_by(self._viewport_size)

    def page_up(self) -> ScrollOutcome:
        """Scroll backward by one viewport."""
        return self.scroll_by(-self._viewport_size)

    def scroll_to_start(self) -> ScrollOutcome:
        """Jump to the beginning of the content."""
        return self.scroll_to(0.0)

    def scroll_to_end(self) -> ScrollOutcome:
        """Jump to the last reachable offset."""
        return self.scroll_to(self.max_offset)

    def apply_wheel(self, dy: float) -> ScrollOutcome:
        """Convert a wheel delta into a single step in the wheel's direction."""
        if dy < 0:
            return self.scroll_by(-self._step)
        if dy > 0:
            return self.scroll_by(self._step)
        return ScrollOutcome(handled=False, offset=self._offset)

    def resize(
        self, *, content_size: float | None = None, viewport_size: float | None = None
    ) -> ScrollOutcome:
        """Update the surface extents and re-clamp the current offset."""
        if content_size is not None:
            _require_size("content_size", content_size, allow_zero=True)
            self._content_size = float(content_size)
        if viewport_size is not None:
            _require_size("viewport_size", viewport_size, allow_zero=False)
            self._viewport_size = float(viewport_size)
        return self.scroll_to(self._offset)

    def _clamp(self, offset: float) -> float:
        return max(0.0, min(float(offset), self.max_offset))


def _require_size(name: str, value: float, *, allow_zero: bool) -> None:
    valid = math.isfinite(value) and (value >= 0 if allow_zero else value > 0)
    if not valid:
        qualifier = "zero or positive" if allow_zero else "positive"
        raise InvalidConfigurationError(f"{name} must be {qualifier} and finite, got {value}")
