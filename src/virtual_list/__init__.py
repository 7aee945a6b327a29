"""Viewport-driven virtualization of large ordered lists."""

from __future__ import annotations

from .cache import CacheBackend, CachedFetcher, InMemoryCache
from .config import CacheConfig, UiConfig, ViewportConfig
from .errors import CacheError, InvalidConfigurationError, LifecycleError, VirtualListError
from .eventbus import Listener, ListenerRegistry
from .scroll import ScrollArea, ScrollEvent, ScrollOutcome, ScrollSurface
from .telemetry import (
    ListenerEvent,
    NullTelemetrySink,
    RangeChangedEvent,
    RecomputeMetric,
    RecordingTelemetrySink,
    TelemetrySink,
)
from .viewport import RangeChange, RenderedItem, ViewportLayout, VirtualList
from .window import (
    DEFAULT_OVERSCAN,
    VisibleRange,
    compute_visible_range,
    max_scroll_offset,
    total_extent,
)

__all__ = [
    "DEFAULT_OVERSCAN",
    "CacheBackend",
    "CacheConfig",
    "CacheError",
    "CachedFetcher",
    "InMemoryCache",
    "InvalidConfigurationError",
    "LifecycleError",
    "Listener",
    "ListenerEvent",
    "ListenerRegistry",
    "NullTelemetrySink",
    "RangeChange",
    "RangeChangedEvent",
    "RecomputeMetric",
    "RecordingTelemetrySink",
    "RenderedItem",
    "ScrollArea",
    "ScrollEvent",
    "ScrollOutcome",
    "ScrollSurface",
    "TelemetrySink",
    "UiConfig",
    "ViewportConfig",
    "ViewportLayout",
    "VirtualList",
    "VirtualListError",
    "VisibleRange",
    "compute_visible_range",
    "max_scroll_offset",
    "total_extent",
]
