"""Command-line interface for computing and browsing virtualized list windows."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import traceback
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from dotenv import find_dotenv, load_dotenv

from .config import UiConfig, ViewportConfig
from .errors import VirtualListError
from .scroll import ScrollArea
from .viewport import VirtualList
from .window import VisibleRange, total_extent

LOG_LEVELS: Final[dict[str, int]] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed command-line options for the virtual list CLI.

    Layout values left as ``None`` fall back to the environment and then to the
    :class:`ViewportConfig` defaults.
    """

    items: int
    scroll_offset: float
    dotenv_path: Path | None
    log_level: int
    ui: bool = field(default=False)
    item_size: float | None = field(default=None)
    container_size: float | None = field(default=None)
    overscan: int | None = field(default=None)


def parse_cli_args(argv: Sequence[str] | None = None) -> CliOptions:
    """Parse command-line arguments into :class:`CliOptions`."""
    parser = argparse.ArgumentParser(
        prog="virtual_list",
        description="Compute the visible window of a virtualized list or browse one interactively.",
    )
    parser.add_argument(
        "--items",
        type=int,
        default=1000,
        help="Number of items in the list (default: 1000)",
    )
    parser.add_argument(
        "--item-size",
        type=float,
        default=None,
        help="Uniform size of one item (default: VIEWPORT_ITEM_SIZE or 40)",
    )
    parser.add_argument(
        "--container-size",
        type=float,
        default=None,
        help="Visible viewport size (default: VIEWPORT_CONTAINER_SIZE or 400)",
    )
    parser.add_argument(
        "--overscan",
        type=int,
        default=None,
        help="Extra items rendered beyond each visible edge (default: VIEWPORT_OVERSCAN or 3)",
    )
    parser.add_argument(
        "--scroll-offset",
        type=float,
        default=0.0,
        help="Scroll offset to compute the window for (clamped to the scrollable range)",
    )
    parser.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Optional path to a .env file with VIEWPORT_* settings",
    )
    parser.add_argument(
        "--log-level",
        choices=tuple(LOG_LEVELS.keys()),
        default="WARNING",
        help="Log level for diagnostic output",
    )
    parser.add_argument(
        "--ui",
        action="store_true",
        help="Browse the list in an interactive terminal view",
    )

    namespace = parser.parse_args(argv)
    if namespace.items < 0:
        parser.error("--items must be zero or positive")
    if namespace.item_size is not None and namespace.item_size <= 0:
        parser.error("--item-size must be greater than zero")
    if namespace.container_size is not None and namespace.container_size <= 0:
        parser.error("--container-size must be greater than zero")
    if namespace.overscan is not None and namespace.overscan < 0:
        parser.error("--overscan must be zero or positive")
    if namespace.scroll_offset < 0:
        parser.error("--scroll-offset must be zero or positive")

    return CliOptions(
        items=int(namespace.items),
        scroll_offset=float(namespace.scroll_offset),
        dotenv_path=namespace.dotenv,
        log_level=LOG_LEVELS[namespace.log_level],
        ui=bool(namespace.ui),
        item_size=namespace.item_size,
        container_size=namespace.container_size,
        overscan=namespace.overscan,
    )


def resolve_viewport_config(options: CliOptions, logger: logging.Logger) -> ViewportConfig:
    """Resolve the viewport configuration from environment variables and CLI overrides."""
    cfg = ViewportConfig.from_environment()
    overrides = {
        "item_size": options.item_size,
        "container_size": options.container_size,
        "overscan": options.overscan,
    }
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        cfg = cfg.with_updates(**updates)
    logger.debug(
        "Viewport config: item_size=%g, container_size=%g, overscan=%d",
        cfg.item_size,
        cfg.container_size,
        cfg.overscan,
    )
    return cfg


def compute_window(options: CliOptions, config: ViewportConfig) -> tuple[VisibleRange, float]:
    """Return the visible range and effective scroll offset for ``options.items`` items.

    The requested offset is clamped by the scroll area the way a host surface would.
    """
    items = range(options.items)
    area = ScrollArea(
        content_size=total_extent(options.items, config.item_size),
        viewport_size=config.container_size,
        step=config.item_size,
    )
    area.scroll_to(options.scroll_offset)
    with VirtualList(items, str, surface=area, config=config) as vlist:
        return vlist.visible_range, vlist.scroll_offset


def format_window(window: VisibleRange, *, item_count: int, scroll_offset: float) -> str:
    """Return a single-line summary of *window*."""
    return (
        f"scroll {scroll_offset:g} | start {window.start_index} | end {window.end_index} "
        f"| offset {window.offset:g} | count {len(window)} | total {item_count}"
    )


def run(options: CliOptions) -> int:
    """Execute the CLI workflow and return the process exit code."""
    logger = _setup_logging(options.log_level)

    dotenv_file = (
        str(options.dotenv_path) if options.dotenv_path is not None else find_dotenv(usecwd=True)
    )
    if dotenv_file:
        load_dotenv(dotenv_file, override=True)
        logger.info("Loaded environment from %s (override=True)", dotenv_file)
    else:
        logger.debug("No .env file found; relying on process environment only")

    try:
        config = resolve_viewport_config(options, logger)
        if options.ui:
            items = [f"Item {index:,}" for index in range(options.items)]
            asyncio.run(_run_ui(items, config, header_text=f"{options.items:,} items"))
            return 0
        window, scroll_offset = compute_window(options, config)
    except VirtualListError as exc:
        logger.error("Virtual list error: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(format_window(window, item_count=options.items, scroll_offset=scroll_offset))
    return 0


async def _run_ui(items: Sequence[str], config: ViewportConfig, *, header_text: str) -> None:
    # Imported lazily so the non-interactive path never touches termios.
    from .ui.runtime import run_ui

    await run_ui(items, viewport=config, ui_config=UiConfig(), header_text=header_text)


def _setup_logging(log_level: int) -> logging.Logger:
    """Configure logging and return the CLI logger."""
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    return logging.getLogger("virtual_list.cli")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the ``virtual_list`` console script."""
    options = parse_cli_args(argv)
    try:
        exit_code = run(options)
    except KeyboardInterrupt:
        exit_code = 130
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)
        exit_code = 1
    raise SystemExit(exit_code)
