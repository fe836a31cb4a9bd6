# src/main.py — v2
"""CLI entry point — insight, dashboard, usage commands.

Usage:
    agrosight insight <category> [key=value ...]
    agrosight dashboard <farm.json> [--today YYYY-MM-DD] [--json]
    agrosight usage
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

from agrosight.core.models import ALL_CATEGORIES
from agrosight.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="agrosight",
        description=f"agrosight v{__version__} — AI farm insights with caching and quota control",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- insight ---
    p_insight = subparsers.add_parser(
        "insight", help="Request a single insight",
    )
    p_insight.add_argument("category", choices=ALL_CATEGORIES, help="Insight category")
    p_insight.add_argument(
        "params", nargs="*", metavar="key=value",
        help="Request params; values are parsed as JSON when possible",
    )
    p_insight.set_defaults(func=_cmd_insight)

    # --- dashboard ---
    p_dashboard = subparsers.add_parser(
        "dashboard", help="Render all dashboard panels for a field",
    )
    p_dashboard.add_argument(
        "farm_file", type=Path,
        help="JSON file with 'farm', 'health' and 'weather' sections",
    )
    p_dashboard.add_argument(
        "--today", type=date.fromisoformat, default=None,
        help="Reference date (YYYY-MM-DD, default: today)",
    )
    p_dashboard.add_argument(
        "--json", action="store_true", dest="as_json",
        help="Print the full report as JSON",
    )
    p_dashboard.set_defaults(func=_cmd_dashboard)

    # --- usage ---
    p_usage = subparsers.add_parser("usage", help="Show cache and quota usage")
    p_usage.set_defaults(func=_cmd_usage)

    return parser


def parse_params(pairs: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values that are valid JSON are decoded."""
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        try:
            params[key] = json.loads(raw)
        except json.JSONDecodeError:
            params[key] = raw
    return params


async def _cmd_insight(args: argparse.Namespace) -> int:
    """Run one insight request."""
    from agrosight.api.facade import generate_insight

    try:
        params = parse_params(args.params)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    result = await generate_insight(args.category, params)
    print(result.text)
    print(f"\n[source: {result.source}]", file=sys.stderr)
    return 0


async def _cmd_dashboard(args: argparse.Namespace) -> int:
    """Render the dashboard for a farm file."""
    from agrosight.api.facade import generate_dashboard

    farm, health, weather = load_farm_file(args.farm_file)
    report = await generate_dashboard(farm, health, weather, today=args.today)

    if args.as_json:
        print(report.model_dump_json(indent=2))
        return 0

    print(f"\nDashboard {report.render_id} ({report.generated_on.isoformat()}):")
    for category, panel in report.panels.items():
        print(f"\n== {category} [{panel.insight.source}] ==")
        print(panel.insight.text)
    _print_usage(report.usage)
    return 0


async def _cmd_usage(args: argparse.Namespace) -> int:
    """Display cache and quota statistics."""
    from agrosight.api.facade import usage

    _print_usage(usage())
    return 0


def load_farm_file(path: Path) -> tuple[Any, Any, Any]:
    """Load farm context, health snapshot and forecast from a JSON file.

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    from agrosight.core.models import CropHealthSnapshot, FarmContext, WeatherDay

    data = json.loads(path.read_text(encoding="utf-8"))
    farm = FarmContext(**data.get("farm", {}))
    health = CropHealthSnapshot(**data["health"]) if data.get("health") else None
    weather = [WeatherDay(**day) for day in data.get("weather", [])]
    return farm, health, weather


def _print_usage(stats: Any) -> None:
    print("\nAPI usage:")
    print(f"  Calls today:  {stats.daily_calls}/{stats.max_calls}")
    print(f"  Remaining:    {stats.remaining_calls}")
    print(f"  Cache size:   {stats.cache_size}")
    print(f"  Status:       {stats.message}")


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from agrosight.config.settings import Settings
    from agrosight.logging.logger import quiet_third_party, setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    quiet_third_party()


if __name__ == "__main__":
    sys.exit(main())
