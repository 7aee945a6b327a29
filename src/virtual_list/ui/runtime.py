"""Interactive runtime wiring Rich Live to a virtual list and a scroll area."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal as _signal
import sys
import termios
import tty
from collections.abc import Iterator, Sequence
from typing import Any, Self

from rich.console import Console
from rich.live import Live
from rich.text import Text

from ..config import UiConfig, ViewportConfig
from ..scroll import ScrollArea
from ..telemetry import RecordingTelemetrySink
from ..viewport import RangeChange, VirtualList
from ..window import total_extent
from .renderer import ViewportSnapshot, render_layout

logger = logging.getLogger(__name__)


async def run_ui(
    items: Sequence[str],
    *,
    viewport: ViewportConfig,
    ui_config: UiConfig | None = None,
    header_text: str = "Virtual list",
) -> None:
    """Run the Rich list viewer until a quit key or shutdown signal is received.

    Each item occupies one terminal line; ``viewport.item_size`` is ignored and the
    container size follows the console height.
    """
    settings = ui_config or UiConfig()
    console = Console()
    capacity = compute_list_capacity(console.size.height)
    config = viewport.with_updates(item_size=1.0, container_size=float(capacity))
    area = ScrollArea(
        content_size=total_extent(len(items), config.item_size),
        viewport_size=config.container_size,
        step=config.item_size,
    )
    telemetry = RecordingTelemetrySink()
    vlist: VirtualList[str, Text] = VirtualList(
        items, Text, surface=area, config=config, telemetry=telemetry
    )
    stop_event = asyncio.Event()
    keys: asyncio.Queue[str] = asyncio.Queue()
    show_details = True
    dirty = True

    def _mark_dirty(change: RangeChange) -> None:
        nonlocal dirty
        dirty = True

    vlist.subscribe(_mark_dirty)
    try:
        with (
            _stop_on_signals(stop_event),
            _CbreakKeyboard(keys),
            vlist,
            create_live(console, settings) as live,
        ):
            while not stop_event.is_set():
                for key in _pending(keys):
                    if key == "QUIT":
                        stop_event.set()
                    elif key == "DETAILS":
                        show_details = not show_details
                        dirty = True
                    elif apply_key(key, area):
                        # The terminal repaints on every scroll, not only on range changes.
                        dirty = True
                height_capacity = compute_list_capacity(console.size.height)
                if height_capacity != capacity:
                    capacity = height_capacity
                    logger.debug("Console resized; list capacity %d", capacity)
                    vlist.update_config(container_size=float(capacity))
                    area.resize(viewport_size=float(capacity))
                    dirty = True
                if dirty and not stop_event.is_set():
                    snapshot = ViewportSnapshot(
                        header_text=header_text,
                        layout=vlist.layout(),
                        telemetry=telemetry.snapshot(),
                    )
                    live.update(render_layout(snapshot, show_details=show_details))
                    dirty = False
                await asyncio.sleep(1.0 / settings.refresh_per_second)
    finally:
        vlist.unsubscribe(_mark_dirty)


def create_live(console: Console, settings: UiConfig) -> Live:
    """Return the full-screen Live display refreshed at the configured rate."""
    return Live(console=console, refresh_per_second=settings.refresh_per_second, screen=True)


def apply_key(key: str, area: ScrollArea) -> bool:
    """Apply a navigation *key* to *area* and return whether the offset moved."""
    if key in ("UP", "k"):
        return area.apply_wheel(-1).handled
    if key in ("DOWN", "j"):
        return area.apply_wheel(1).handled
    if key == "PAGE_DOWN":
        return area.page_down().handled
    if key == "PAGE_UP":
        return area.page_up().handled
    if key == "HOME":
        return area.scroll_to_start().handled
    if key == "END":
        return area.scroll_to_end().handled
    return False


_LAYOUT_OVERHEAD = 6
_MIN_VISIBLE_LINES = 1


def compute_list_capacity(height: int) -> int:
    """Return the number of list lines that fit below the header and above the footer."""
    return max(_MIN_VISIBLE_LINES, height - _LAYOUT_OVERHEAD)


def _pending(queue: asyncio.Queue[str]) -> Iterator[str]:
    while not queue.empty():
        yield queue.get_nowait()


@contextlib.contextmanager
def _stop_on_signals(stop_event: asyncio.Event) -> Iterator[None]:
    """Set *stop_event* on SIGINT/SIGTERM while the block runs."""
    loop = asyncio.get_running_loop()
    installed: list[_signal.Signals] = []
    for signum in (_signal.SIGINT, _signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handler for %s unavailable", signum.name)
            continue
        installed.append(signum)
    try:
        yield
    finally:
        for signum in installed:
            loop.remove_signal_handler(signum)


class _CbreakKeyboard:
    """Hold stdin in cbreak mode and forward parsed key tokens to a queue."""

    def __init__(self, queue: asyncio.Queue[str]) -> None:
        self._queue = queue
        self._loop = asyncio.get_running_loop()
        self._fd: int | None = sys.stdin.fileno() if sys.stdin.isatty() else None
        self._saved_attrs: list[Any] | None = None

    def __enter__(self) -> Self:
        if self._fd is None:
            logger.debug("stdin is not a terminal; keyboard input disabled")
            return self
        self._saved_attrs = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        self._loop.add_reader(self._fd, self._drain)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._fd is None or self._saved_attrs is None:
            return
        self._loop.remove_reader(self._fd)
        termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
        self._saved_attrs = None

    def _drain(self) -> None:
        assert self._fd is not None
        try:
            chunk = os.read(self._fd, 32)
        except OSError as exc:
            logger.debug("Keyboard read failed: %s", exc)
            return
        for token in parse_keys(chunk):
            self._queue.put_nowait(token)


_ESC = 0x1B
_ESCAPE_SEQUENCES: dict[bytes, str] = {
    b"[A": "UP",
    b"[B": "DOWN",
    b"[H": "HOME",
    b"[F": "END",
    b"[5~": "PAGE_UP",
    b"[6~": "PAGE_DOWN",
}
_SINGLE_KEYS: dict[int, str] = {
    ord("j"): "j",
    ord("k"): "k",
    ord(" "): "PAGE_DOWN",
    ord("b"): "PAGE_UP",
    ord("g"): "HOME",
    ord("G"): "END",
    ord("d"): "DETAILS",
    ord("q"): "QUIT",
}


def parse_keys(data: bytes) -> list[str]:
    """Parse raw terminal bytes into navigation tokens, skipping unknown input."""
    tokens: list[str] = []
    pos = 0
    while pos < len(data):
        if data[pos] == _ESC:
            pos += 1
            for sequence, token in _ESCAPE_SEQUENCES.items():
                if data.startswith(sequence, pos):
                    tokens.append(token)
                    pos += len(sequence)
                    break
            continue
        token = _SINGLE_KEYS.get(data[pos])
        if token is not None:
            tokens.append(token)
        pos += 1
    return tokens
