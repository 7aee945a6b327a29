"""Tests for the virtual list CLI helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from virtual_list.cli import (
    compute_window,
    format_window,
    parse_cli_args,
    resolve_viewport_config,
    run,
)
from virtual_list.config import ViewportConfig

VIEWPORT_ENV_KEYS = ("VIEWPORT_ITEM_SIZE", "VIEWPORT_CONTAINER_SIZE", "VIEWPORT_OVERSCAN")


@pytest.fixture(autouse=True)
def _clean_viewport_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in VIEWPORT_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_parse_cli_defaults() -> None:
    """Layout flags default to None so the environment can supply them."""
    options = parse_cli_args([])
    assert options.items == 1000
    assert options.scroll_offset == 0
    assert options.item_size is None
    assert options.container_size is None
    assert options.overscan is None
    assert options.ui is False
    assert options.log_level == logging.WARNING


@pytest.mark.parametrize(
    "argv",
    [
        ["--items", "-1"],
        ["--item-size", "0"],
        ["--container-size", "-5"],
        ["--overscan", "-1"],
        ["--scroll-offset", "-3"],
    ],
)
def test_parse_cli_rejects_invalid_values(argv: list[str]) -> None:
    """Argument validation exits with a usage error."""
    with pytest.raises(SystemExit):
        parse_cli_args(argv)


def test_resolve_viewport_config_cli_overrides_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """CLI flags take precedence over environment values."""
    monkeypatch.setenv("VIEWPORT_ITEM_SIZE", "20")
    monkeypatch.setenv("VIEWPORT_OVERSCAN", "1")
    options = parse_cli_args(["--overscan", "4", "--container-size", "200"])

    config = resolve_viewport_config(options, logging.getLogger("test"))

    assert config.item_size == 20
    assert config.container_size == 200
    assert config.overscan == 4


def test_compute_window_matches_mid_list_scenario() -> None:
    """The CLI computes the documented 100-item window."""
    options = parse_cli_args(["--items", "100", "--scroll-offset", "500"])
    config = ViewportConfig(item_size=50, container_size=300, overscan=3)

    window, offset = compute_window(options, config)

    assert (window.start_index, window.end_index, window.offset) == (7, 19, 350)
    assert offset == 500


def test_compute_window_clamps_offset_to_scrollable_range() -> None:
    """An offset past the end is clamped by the scroll area before computing."""
    options = parse_cli_args(["--items", "100", "--scroll-offset", "99999"])
    config = ViewportConfig(item_size=50, container_size=300, overscan=3)

    window, offset = compute_window(options, config)

    assert offset == 4700
    assert window.end_index == 100


def test_format_window() -> None:
    """The summary line lists bounds, offset and counts."""
    options = parse_cli_args(["--items", "5"])
    config = ViewportConfig(item_size=40, container_size=1000, overscan=3)
    window, offset = compute_window(options, config)
    assert (
        format_window(window, item_count=5, scroll_offset=offset)
        == "scroll 0 | start 0 | end 5 | offset 0 | count 5 | total 5"
    )


def test_run_prints_window(capsys: pytest.CaptureFixture[str]) -> None:
    """A successful run prints the summary and exits cleanly."""
    options = parse_cli_args(
        [
            "--items",
            "100",
            "--item-size",
            "50",
            "--container-size",
            "300",
            "--scroll-offset",
            "500",
        ]
    )
    assert run(options) == 0
    out = capsys.readouterr().out.strip()
    assert out == "scroll 500 | start 7 | end 19 | offset 350 | count 12 | total 100"


def test_run_reads_dotenv_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Values from the .env file feed the viewport configuration."""
    # Registered first so monkeypatch restores the variables load_dotenv overrides.
    for key in VIEWPORT_ENV_KEYS:
        monkeypatch.setenv(key, "1")
    dotenv_path = tmp_path / "viewport.env"
    dotenv_path.write_text(
        "VIEWPORT_ITEM_SIZE=50\nVIEWPORT_CONTAINER_SIZE=300\nVIEWPORT_OVERSCAN=0\n"
    )
    options = parse_cli_args(
        ["--items", "100", "--scroll-offset", "500", "--dotenv", str(dotenv_path)]
    )

    assert run(options) == 0

    out = capsys.readouterr().out.strip()
    assert "start 10 | end 16 | offset 500" in out


def test_run_reports_configuration_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Invalid environment configuration yields exit code 1 and an error line."""
    monkeypatch.setenv("VIEWPORT_CONTAINER_SIZE", "0")
    options = parse_cli_args(["--items", "10"])

    assert run(options) == 1

    err = capsys.readouterr().err
    assert "error: invalid viewport configuration" in err
