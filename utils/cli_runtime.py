"""CLI/runtime bootstrap helpers for flakesim commands."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional


def _is_truthy_env(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def color_enabled(no_color_flag: bool = False) -> bool:
    """Colors are on unless disabled by flag, NO_COLOR or FLAKESIM_NO_COLOR."""
    if no_color_flag:
        return False
    if os.getenv("NO_COLOR") is not None:
        return False
    return not _is_truthy_env(os.getenv("FLAKESIM_NO_COLOR"))


def progress_enabled() -> bool:
    """Progress bars only in interactive terminals outside CI."""
    is_tty = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    return is_tty and not _is_truthy_env(os.getenv("CI"))


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_flakesim_arg_parser() -> argparse.ArgumentParser:
    """Create the flakesim CLI parser."""
    parser = argparse.ArgumentParser(
        prog="flakesim",
        description="Randomized flaky-test scenarios for CI test-report demos.",
        epilog="Examples:\n"
        "  flakesim list\n"
        "  flakesim run --iterations 20 --seed 7 --junit reports/junit.xml\n"
        "  flakesim run --suite IntegrationTest\n"
        "  flakesim pipeline --write ci/pipeline.json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", help="Path to config.json file")
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors (also respects NO_COLOR/FLAKESIM_NO_COLOR).",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    list_parser = subparsers.add_parser("list", help="Show the scenario catalog")
    list_parser.add_argument("--suite", help="Only show this suite")

    run_parser = subparsers.add_parser("run", help="Run scenarios and report outcomes")
    run_parser.add_argument("--iterations", "-n", type=_positive_int, help="Invocations per scenario")
    run_parser.add_argument("--seed", type=int, help="Seed for reproducible outcomes")
    run_parser.add_argument("--suite", help="Only run this suite")
    run_parser.add_argument("--scenario", help="Only run this scenario id (suite::name)")
    run_parser.add_argument("--junit", help="Write a JUnit XML report to this path")
    run_parser.add_argument("--events", help="Append JSON-lines events to this path")

    pipeline_parser = subparsers.add_parser("pipeline", help="Validate and show the CI pipeline declaration")
    pipeline_parser.add_argument("--file", "-f", help="Pipeline JSON to load (default: built-in declaration)")
    pipeline_parser.add_argument("--write", "-w", help="Write the declaration as JSON to this path")

    return parser
