"""Pure viewport window calculations for virtualized lists.

The functions here translate a scroll offset plus layout parameters into the
minimal contiguous index range that must be materialized. They never touch the
items themselves, only the item count.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import InvalidConfigurationError

DEFAULT_OVERSCAN = 3


@dataclass(frozen=True, slots=True)
class VisibleRange:
    """Half-open index range ``[start_index, end_index)`` plus its block offset."""

    start_index: int
    end_index: int
    offset: float

    def __len__(self) -> int:
        """Return the number of items inside the range."""
        return self.end_index - self.start_index

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when no item needs to be materialized."""
        return self.end_index <= self.start_index

    def as_slice(self) -> slice:
        """Return the range as a slice usable on the backing sequence."""
        return slice(self.start_index, self.end_index)

    def indices(self) -> range:
        """Return the visible indices in ascending order."""
        return range(self.start_index, self.end_index)

    def take[T](self, items: Sequence[T]) -> list[T]:
        """Return the materialized subsequence ``items[start_index:end_index]``."""
        return list(items[self.as_slice()])


def compute_visible_range(
    item_count: int,
    item_size: float,
    container_size: float,
    scroll_offset: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> VisibleRange:
    """Return the index range to render for the given scroll position.

    The range covers every item whose extent intersects
    ``[scroll_offset, scroll_offset + container_size]`` plus up to *overscan* items
    on each side, clipped to ``[0, item_count]``. The scroll offset is trusted as
    reported by the host surface and is not clamped here; a negative offset from an
    elastic overscroll only clips the range at the top.

    Raises:
        InvalidConfigurationError: If a size is not positive and finite, or
            *overscan* or *item_count* is negative, or *scroll_offset* is not finite.

    """
    validate_layout(item_size=item_size, container_size=container_size, overscan=overscan)
    if item_count < 0:
        raise InvalidConfigurationError(f"item_count must be zero or positive, got {item_count}")
    if not math.isfinite(scroll_offset):
        raise InvalidConfigurationError(f"scroll_offset must be finite, got {scroll_offset}")

    first_visible = math.floor(scroll_offset / item_size)
    last_visible = math.ceil((scroll_offset + container_size) / item_size)
    # An overscrolled (negative) offset still yields indices inside [0, item_count].
    end_index = max(0, min(item_count, last_visible + overscan))
    # A list that shrank below the reported offset yields an empty range at its end.
    start_index = min(max(0, first_visible - overscan), end_index)
    return VisibleRange(
        start_index=start_index,
        end_index=end_index,
        offset=start_index * item_size,
    )


def validate_layout(*, item_size: float, container_size: float, overscan: int) -> None:
    """Fail fast on layout parameters that would yield a degenerate range."""
    if not _is_positive_finite(item_size):
        raise InvalidConfigurationError(f"item_size must be positive and finite, got {item_size}")
    if not _is_positive_finite(container_size):
        raise InvalidConfigurationError(
            f"container_size must be positive and finite, got {container_size}"
        )
    if overscan < 0:
        raise InvalidConfigurationError(f"overscan must be zero or positive, got {overscan}")


def total_extent(item_count: int, item_size: float) -> float:
    """Return the size of the full-length spacer backing the scrollbar."""
    return max(0, item_count) * item_size


def max_scroll_offset(item_count: int, item_size: float, container_size: float) -> float:
    """Return the largest meaningful scroll offset for the list."""
    return max(0.0, total_extent(item_count, item_size) - container_size)


def _is_positive_finite(value: float) -> bool:
    return math.isfinite(value) and value > 0
