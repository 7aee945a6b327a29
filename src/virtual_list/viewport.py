"""Virtualized list component driven by a scroll surface.

The component owns the viewport state for a single list. It subscribes to its
scroll surface while mounted, recomputes the visible range once per scroll
notification and informs render listeners only when that range changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Self

from .config import ViewportConfig
from .errors import LifecycleError
from .eventbus import Listener, ListenerRegistry
from .scroll import ScrollEvent, ScrollSurface
from .telemetry import (
    ListenerEvent,
    NullTelemetrySink,
    RangeChangedEvent,
    RecomputeMetric,
    TelemetrySink,
)
from .window import VisibleRange, compute_visible_range, total_extent, validate_layout

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RangeChange:
    """Notification delivered to render listeners when the visible range moves."""

    previous: VisibleRange | None
    current: VisibleRange


@dataclass(frozen=True, slots=True)
class RenderedItem[OutputT]:
    """Output of the caller's renderer for a single visible index."""

    index: int
    offset: float
    output: OutputT


@dataclass(frozen=True, slots=True)
class ViewportLayout[OutputT]:
    """Three-layer host layout: viewport, full-size spacer, translated block.

    The host renders a scroll region of ``container_size`` containing a spacer of
    ``total_extent`` inside which ``rows`` are stacked at ``item_size`` intervals
    starting at ``offset``.
    """

    container_size: float
    total_extent: float
    item_size: float
    offset: float
    scroll_offset: float
    item_count: int
    rows: list[RenderedItem[OutputT]]


class VirtualList[T, OutputT]:
    """Render only the slice of *items* that intersects the scroll viewport."""

    def __init__(
        self,
        items: Sequence[T],
        render: Callable[[T], OutputT],
        *,
        surface: ScrollSurface,
        config: ViewportConfig | None = None,
        telemetry: TelemetrySink | None = None,
    ) -> None:
        """Create an unmounted list over *items* using the caller's *render* mapping.

        Raises:
            InvalidConfigurationError: If *config* carries invalid layout values.

        """
        self._config = config or ViewportConfig()
        validate_layout(
            item_size=self._config.item_size,
            container_size=self._config.container_size,
            overscan=self._config.overscan,
        )
        self._items = items
        self._render = render
        self._surface = surface
        self._telemetry = telemetry or NullTelemetrySink()
        self._listeners: ListenerRegistry[RangeChange] = ListenerRegistry("range")
        self._scroll_offset = 0.0
        self._range: VisibleRange | None = None
        self._item_count = 0
        self._mounted = False

    def __enter__(self) -> Self:
        self.mount()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unmount()

    @property
    def config(self) -> ViewportConfig:
        """Return the active layout configuration."""
        return self._config

    @property
    def items(self) -> Sequence[T]:
        """Return the caller-owned item sequence."""
        return self._items

    @property
    def surface(self) -> ScrollSurface:
        """Return the scroll surface this list follows."""
        return self._surface

    @property
    def mounted(self) -> bool:
        """Return ``True`` while the scroll listener is attached."""
        return self._mounted

    @property
    def scroll_offset(self) -> float:
        """Return the last scroll offset reported by the surface."""
        return self._scroll_offset

    @property
    def visible_range(self) -> VisibleRange:
        """Return the current visible range, reclamped if the item count changed."""
        return self._current_range()

    def mount(self) -> None:
        """Attach to the scroll surface and compute the initial range."""
        if self._mounted:
            return
        self._surface.subscribe(self._on_scroll)
        self._mounted = True
        self._scroll_offset = float(self._surface.scroll_offset)
        logger.debug("Mounted virtual list at offset %.1f", self._scroll_offset)
        self._telemetry.record_event(
            ListenerEvent(action="attached", scroll_offset=self._scroll_offset)
        )
        self._recompute()

    def unmount(self) -> None:
        """Detach from the scroll surface; later notifications are ignored."""
        if not self._mounted:
            return
        self._surface.unsubscribe(self._on_scroll)
        self._mounted = False
        logger.debug("Unmounted virtual list at offset %.1f", self._scroll_offset)
        self._telemetry.record_event(
            ListenerEvent(action="detached", scroll_offset=self._scroll_offset)
        )

    def attach(self, surface: ScrollSurface) -> None:
        """Follow *surface* instead of the current one, moving the listener if mounted."""
        if surface is self._surface:
            return
        was_mounted = self._mounted
        self.unmount()
        self._surface = surface
        if was_mounted:
            self.mount()

    def subscribe(self, listener: Listener[RangeChange]) -> None:
        """Register *listener* for visible range changes."""
        self._listeners.subscribe(listener)

    def unsubscribe(self, listener: Listener[RangeChange]) -> None:
        """Remove a range change *listener*."""
        self._listeners.unsubscribe(listener)

    def set_items(self, items: Sequence[T]) -> bool:
        """Replace the item sequence and reclamp the range to its length.

        Returns ``True`` when the visible range changed.
        """
        self._items = items
        if not self._mounted:
            return False
        return self._recompute()

    def update_config(self, **changes: Any) -> bool:
        """Apply layout *changes*, validating them before they take effect.

        Returns ``True`` when the visible range changed.

        Raises:
            InvalidConfigurationError: If the resulting configuration is invalid.

        """
        self._config = self._config.with_updates(**changes)
        if not self._mounted:
            return False
        return self._recompute()

    def refresh(self) -> bool:
        """Recompute against the current items, e.g. after an in-place mutation."""
        if not self._mounted:
            return False
        return self._recompute()

    def visible_items(self) -> list[T]:
        """Return ``items[start_index:end_index]`` for the current range."""
        return self._current_range().take(self._items)

    def render(self) -> list[RenderedItem[OutputT]]:
        """Invoke the renderer once per visible index, in ascending order."""
        visible = self._current_range()
        item_size = self._config.item_size
        return [
            RenderedItem(
                index=index, offset=index * item_size, output=self._render(self._items[index])
            )
            for index in visible.indices()
        ]

    def layout(self) -> ViewportLayout[OutputT]:
        """Return the render-ready three-layer layout for the host."""
        rows = self.render()
        visible = self._current_range()
        return ViewportLayout(
            container_size=self._config.container_size,
            total_extent=total_extent(len(self._items), self._config.item_size),
            item_size=self._config.item_size,
            offset=visible.offset,
            scroll_offset=self._scroll_offset,
            item_count=len(self._items),
            rows=rows,
        )

    def _on_scroll(self, event: ScrollEvent) -> None:
        if not self._mounted:
            return
        self._scroll_offset = float(event.offset)
        self._recompute()

    def _current_range(self) -> VisibleRange:
        if not self._mounted or self._range is None:
            raise LifecycleError("virtual list must be mounted before its range is read")
        if self._item_count != len(self._items):
            self._recompute()
        assert self._range is not None
        return self._range

    def _recompute(self) -> bool:
        item_count = len(self._items)
        current = compute_visible_range(
            item_count,
            self._config.item_size,
            self._config.container_size,
            self._scroll_offset,
            self._config.overscan,
        )
        previous = self._range
        changed = current != previous
        self._item_count = item_count
        self._telemetry.record_metric(
            RecomputeMetric(
                scroll_offset=self._scroll_offset, item_count=item_count, changed=changed
            )
        )
        if not changed:
            return False
        self._range = current
        logger.debug(
            "Visible range %d-%d of %d (offset %.1f)",
            current.start_index,
            current.end_index,
            item_count,
            current.offset,
        )
        self._telemetry.record_event(
            RangeChangedEvent(previous=previous, current=current, item_count=item_count)
        )
        self._listeners.publish(RangeChange(previous=previous, current=current))
        return True
