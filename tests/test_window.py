"""Tests for the pure visible range calculation."""

from __future__ import annotations

import math

import pytest

from virtual_list import InvalidConfigurationError, VisibleRange, compute_visible_range
from virtual_list.window import max_scroll_offset, total_extent

ITEM_SIZES = (1, 7, 50)
CONTAINER_SIZES = (1, 13, 300)
OVERSCANS = (0, 1, 3)
ITEM_COUNTS = (0, 1, 9, 100)


def _offsets(item_count: int, item_size: int, container_size: int) -> list[int]:
    highest = int(max_scroll_offset(item_count, item_size, container_size))
    step = max(1, highest // 17)
    return sorted({*range(0, highest + 1, step), highest})


def test_compute_visible_range_mid_list_scenario() -> None:
    """A list scrolled to the middle renders the viewport plus three items per side."""
    window = compute_visible_range(100, 50, 300, 500, overscan=3)
    assert window == VisibleRange(start_index=7, end_index=19, offset=350)
    assert len(window) == 12
    assert window.take(list(range(100))) == list(range(7, 19))


def test_compute_visible_range_short_list_renders_everything() -> None:
    """A list shorter than the viewport materializes every item at offset zero."""
    window = compute_visible_range(5, 40, 1000, 0, overscan=3)
    assert (window.start_index, window.end_index, window.offset) == (0, 5, 0)
    assert window.take(["a", "b", "c", "d", "e"]) == ["a", "b", "c", "d", "e"]


def test_compute_visible_range_empty_list() -> None:
    """An empty list collapses both bounds to zero."""
    window = compute_visible_range(0, 50, 300, 0)
    assert window.start_index == window.end_index == 0
    assert window.is_empty
    assert window.take([]) == []


def test_compute_visible_range_default_overscan_is_three() -> None:
    """Omitting overscan behaves like an overscan of three items."""
    assert compute_visible_range(100, 50, 300, 500) == compute_visible_range(
        100, 50, 300, 500, overscan=3
    )


def test_compute_visible_range_invariants_hold_across_inputs() -> None:
    """Bounds stay ordered, the offset tracks the start and visible items are covered."""
    for item_count in ITEM_COUNTS:
        for item_size in ITEM_SIZES:
            for container_size in CONTAINER_SIZES:
                for overscan in OVERSCANS:
                    for scroll in _offsets(item_count, item_size, container_size):
                        window = compute_visible_range(
                            item_count, item_size, container_size, scroll, overscan
                        )
                        assert 0 <= window.start_index <= window.end_index <= item_count
                        assert window.offset == window.start_index * item_size
                        for index in range(item_count):
                            top = index * item_size
                            overlaps = top < scroll + container_size and top + item_size > scroll
                            if overlaps:
                                assert window.start_index <= index < window.end_index


def test_compute_visible_range_at_top_starts_at_zero() -> None:
    """A zero scroll offset always starts the range at the first item."""
    for overscan in OVERSCANS:
        assert compute_visible_range(1000, 20, 200, 0, overscan).start_index == 0


def test_compute_visible_range_at_max_scroll_reaches_end() -> None:
    """Scrolling to the maximum offset always includes the last item."""
    for item_count in (1, 10, 101):
        for overscan in OVERSCANS:
            highest = max_scroll_offset(item_count, 50, 300)
            window = compute_visible_range(item_count, 50, 300, highest, overscan)
            assert window.end_index == item_count


def test_compute_visible_range_is_idempotent() -> None:
    """Identical inputs yield identical ranges."""
    first = compute_visible_range(250, 32, 480, 1234, 2)
    second = compute_visible_range(250, 32, 480, 1234, 2)
    assert first == second


def test_compute_visible_range_offset_beyond_shrunken_list_is_empty() -> None:
    """A stale offset past the end of a shrunken list still yields an ordered range."""
    window = compute_visible_range(5, 50, 300, 5000, 3)
    assert window.start_index == window.end_index == 5
    assert window.is_empty
    assert window.offset == 250


@pytest.mark.parametrize(
    ("item_size", "container_size", "overscan"),
    [
        (0, 300, 3),
        (-1, 300, 3),
        (math.inf, 300, 3),
        (math.nan, 300, 3),
        (50, 0, 3),
        (50, -10, 3),
        (50, math.inf, 3),
        (50, 300, -1),
    ],
)
def test_compute_visible_range_rejects_invalid_layout(
    item_size: float, container_size: float, overscan: int
) -> None:
    """Degenerate layouts fail fast instead of producing empty or infinite ranges."""
    with pytest.raises(InvalidConfigurationError):
        compute_visible_range(10, item_size, container_size, 0, overscan)


def test_compute_visible_range_rejects_negative_item_count() -> None:
    """A negative item count is a configuration error and also a ValueError."""
    with pytest.raises(ValueError):
        compute_visible_range(-1, 50, 300, 0)


def test_compute_visible_range_overscrolled_offset_stays_in_bounds() -> None:
    """An elastic overscroll above the top never produces negative indices."""
    assert compute_visible_range(10, 50, 300, -1000, overscan=3) == VisibleRange(0, 0, 0)
    window = compute_visible_range(10, 50, 300, -100, overscan=3)
    assert window == VisibleRange(start_index=0, end_index=7, offset=0)


@pytest.mark.parametrize("scroll_offset", [math.nan, math.inf, -math.inf])
def test_compute_visible_range_rejects_non_finite_offset(scroll_offset: float) -> None:
    """A NaN or infinite offset is reported as a configuration error."""
    with pytest.raises(InvalidConfigurationError, match="scroll_offset"):
        compute_visible_range(10, 50, 300, scroll_offset)


def test_visible_range_helpers() -> None:
    """Slice and index helpers mirror the half-open range."""
    window = VisibleRange(start_index=3, end_index=6, offset=30)
    assert list(window.indices()) == [3, 4, 5]
    assert "abcdefgh"[window.as_slice()] == "def"
    assert not window.is_empty


def test_extent_helpers() -> None:
    """The spacer extent spans every item and the max offset never goes negative."""
    assert total_extent(100, 50) == 5000
    assert total_extent(0, 50) == 0
    assert max_scroll_offset(100, 50, 300) == 4700
    assert max_scroll_offset(3, 50, 300) == 0
