"""Tests for the in-memory scroll area and the listener registry."""

from __future__ import annotations

import pytest

from virtual_list import InvalidConfigurationError, ListenerRegistry, ScrollArea, ScrollEvent

CONTENT_SIZE = 1000.0
VIEWPORT_SIZE = 300.0
MAX_OFFSET = CONTENT_SIZE - VIEWPORT_SIZE


def _area(step: float = 10.0) -> tuple[ScrollArea, list[ScrollEvent]]:
    area = ScrollArea(content_size=CONTENT_SIZE, viewport_size=VIEWPORT_SIZE, step=step)
    events: list[ScrollEvent] = []
    area.subscribe(events.append)
    return area, events


def test_scroll_to_clamps_to_content_bounds() -> None:
    """Offsets are clamped to the scrollable range like a host container."""
    area, events = _area()
    outcome = area.scroll_to(5000)
    assert outcome.handled
    assert area.scroll_offset == MAX_OFFSET
    area.scroll_to(-25)
    assert area.scroll_offset == 0
    assert [(event.previous, event.offset) for event in events] == [
        (0, MAX_OFFSET),
        (MAX_OFFSET, 0),
    ]


def test_unchanged_offset_does_not_notify() -> None:
    """Listeners only hear about real offset changes."""
    area, events = _area()
    outcome = area.scroll_to(0)
    assert not outcome.handled
    assert events == []


def test_wheel_and_page_navigation() -> None:
    """Wheel deltas move one step; paging moves one viewport."""
    area, _ = _area(step=10)
    assert area.apply_wheel(3.5).offset == 10
    assert area.apply_wheel(-1).offset == 0
    assert not area.apply_wheel(0).handled
    assert not area.apply_wheel(-1).handled
    assert area.page_down().offset == VIEWPORT_SIZE
    assert area.page_up().offset == 0
    assert area.scroll_to_end().offset == MAX_OFFSET
    assert not area.page_down().handled
    assert area.scroll_to_start().offset == 0


def test_resize_reclamps_and_notifies() -> None:
    """Shrinking the content pulls the offset back inside the new range."""
    area, events = _area()
    area.scroll_to_end()
    outcome = area.resize(content_size=500)
    assert outcome.handled
    assert area.scroll_offset == 200
    assert events[-1] == ScrollEvent(offset=200, previous=MAX_OFFSET)
    area.resize(viewport_size=600)
    assert area.scroll_offset == 0
    assert area.max_offset == 0


def test_content_smaller_than_viewport_cannot_scroll() -> None:
    """A short list pins the offset at zero."""
    area = ScrollArea(content_size=100, viewport_size=300)
    assert not area.scroll_by(50).handled
    assert area.scroll_offset == 0


@pytest.mark.parametrize(
    ("content_size", "viewport_size", "step"),
    [(100, 0, 1), (100, -5, 1), (-1, 10, 1), (100, 10, 0), (float("inf"), 10, 1)],
)
def test_invalid_surface_dimensions_raise(
    content_size: float, viewport_size: float, step: float
) -> None:
    """Degenerate surfaces are rejected at construction."""
    with pytest.raises(InvalidConfigurationError):
        ScrollArea(content_size=content_size, viewport_size=viewport_size, step=step)


def test_listener_count_tracks_subscriptions() -> None:
    """Duplicate subscriptions collapse and unsubscribing is idempotent."""
    area = ScrollArea(content_size=CONTENT_SIZE, viewport_size=VIEWPORT_SIZE)
    events: list[ScrollEvent] = []
    area.subscribe(events.append)
    area.subscribe(events.append)
    assert area.listener_count == 1
    area.unsubscribe(events.append)
    area.unsubscribe(events.append)
    assert area.listener_count == 0


def test_registry_publishes_in_subscription_order() -> None:
    """Events reach listeners in the order they subscribed."""
    registry: ListenerRegistry[int] = ListenerRegistry("test")
    seen: list[tuple[str, int]] = []
    registry.subscribe(lambda value: seen.append(("first", value)))
    registry.subscribe(lambda value: seen.append(("second", value)))
    registry.publish(7)
    assert seen == [("first", 7), ("second", 7)]
    assert len(registry) == 2


def test_registry_allows_listener_to_detach_while_notified() -> None:
    """A listener removing itself during publish does not skip its neighbours."""
    registry: ListenerRegistry[str] = ListenerRegistry("test")
    seen: list[str] = []

    def once(event: str) -> None:
        seen.append(f"once:{event}")
        registry.unsubscribe(once)

    def always(event: str) -> None:
        seen.append(f"always:{event}")

    registry.subscribe(once)
    registry.subscribe(always)
    registry.publish("a")
    registry.publish("b")
    assert seen == ["once:a", "always:a", "always:b"]
    assert once not in registry
    assert always in registry
