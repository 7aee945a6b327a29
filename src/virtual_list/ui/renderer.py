"""Pure Rich renderer for the virtual list demo.

Converts a ViewportSnapshot into Rich renderables. Only the rows that the
virtual list materialized are ever turned into table cells.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from rich.align import Align
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..telemetry import TelemetrySnapshot
from ..viewport import RenderedItem, ViewportLayout


@dataclass(frozen=True, slots=True)
class ViewportSnapshot:
    """Immutable snapshot fed to the renderer."""

    header_text: str
    layout: ViewportLayout[Text]
    telemetry: TelemetrySnapshot | None = None


def render_layout(snapshot: ViewportSnapshot, *, show_details: bool = True) -> Layout:
    """Return a Rich Layout for the given snapshot."""
    layout = Layout(name="root")
    layout.split_column(
        Layout(name="header", size=3), Layout(name="body", ratio=1), Layout(name="footer", size=1)
    )
    if show_details:
        layout["body"].split_row(Layout(name="list", ratio=3), Layout(name="side", ratio=1))
    else:
        layout["body"].split_row(Layout(name="list", ratio=1))
    layout["header"].update(_render_header(snapshot))
    layout["list"].update(_render_list(snapshot.layout))
    if show_details:
        layout["side"].update(_render_side(snapshot.layout, snapshot.telemetry))
    layout["footer"].update(
        Align.left(
            Text(
                "j/k: line • space/b: page • g/G: top/bottom • d: details • q: quit",
                style="dim",
            )
        )
    )
    return layout


def rows_in_view[OutputT](view: ViewportLayout[OutputT]) -> list[RenderedItem[OutputT]]:
    """Return the rendered rows intersecting the viewport, dropping overscan rows.

    A terminal has no native scrolling, so the host crops the translated block to
    ``[scroll_offset, scroll_offset + container_size)`` itself.
    """
    top = view.scroll_offset
    bottom = view.scroll_offset + view.container_size
    return [row for row in view.rows if row.offset + view.item_size > top and row.offset < bottom]


def scrollbar_thumb[OutputT](view: ViewportLayout[OutputT], track: int) -> tuple[int, int]:
    """Return ``(start, length)`` of the scrollbar thumb on a *track* of cells."""
    if track <= 0:
        return 0, 0
    if view.total_extent <= view.container_size:
        return 0, track
    length = max(1, round(track * view.container_size / view.total_extent))
    max_offset = view.total_extent - view.container_size
    start = math.floor((track - length) * min(1.0, view.scroll_offset / max_offset))
    return start, length


def _render_header(snapshot: ViewportSnapshot) -> Panel:
    view = snapshot.layout
    title = Text(snapshot.header_text, style="bold")
    subtitle = Text.assemble(
        "items ",
        (f"{view.item_count:,}", "bold cyan"),
        "  rendered ",
        (str(len(view.rows)), "bold green"),
    )
    inner = Table.grid(expand=True)
    inner.add_column(ratio=3)
    inner.add_column(ratio=1, justify="right")
    inner.add_row(title, subtitle)
    return Panel(inner, title="Virtual List", border_style="cyan")


def _render_list(view: ViewportLayout[Text]) -> Panel:
    visible = rows_in_view(view)
    thumb_start, thumb_length = scrollbar_thumb(view, len(visible))
    table = Table.grid(expand=True, padding=(0, 1))
    table.add_column(justify="right", style="dim", no_wrap=True)
    table.add_column(ratio=1, overflow="ellipsis", no_wrap=True)
    table.add_column(no_wrap=True, width=1)
    for position, row in enumerate(visible):
        in_thumb = thumb_start <= position < thumb_start + thumb_length
        table.add_row(
            str(row.index),
            row.output,
            Text("█" if in_thumb else "│", style="cyan" if in_thumb else "dim"),
        )
    if not visible:
        table.add_row("", Text("No items", style="dim"), "")
    return Panel(table, title="Items", border_style="blue")


def _render_side(view: ViewportLayout[Text], telemetry: TelemetrySnapshot | None) -> Panel:
    grid = Table.grid(expand=True)
    grid.add_column(justify="right", style="cyan")
    grid.add_column()
    start, end = _bounds(view.rows)
    max_offset = max(0.0, view.total_extent - view.container_size)
    grid.add_row("Scroll: ", f"{view.scroll_offset:g} / {max_offset:g}")
    grid.add_row("Viewport: ", f"{view.container_size:g}")
    grid.add_row("Extent: ", f"{view.total_extent:g}")
    grid.add_row("Range: ", f"{start}-{end}")
    grid.add_row("Offset: ", f"{view.offset:g}")
    if telemetry is not None:
        grid.add_row("Recomputes: ", str(telemetry.recomputations))
        grid.add_row("Changes: ", str(telemetry.range_changes))
    return Panel(grid, title="Details", border_style="magenta")


def _bounds(rows: Iterable[RenderedItem[Text]]) -> tuple[int, int]:
    indices = [row.index for row in rows]
    if not indices:
        return 0, 0
    return indices[0], indices[-1] + 1
