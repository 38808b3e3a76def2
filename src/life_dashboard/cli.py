"""Command line entrypoints: the Withings sync job and a terminal summary."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from life_dashboard.app_logging import configure_logging
from life_dashboard.config import Settings
from life_dashboard.containers import build_shell, build_sync_service
from life_dashboard.domain.errors import ConfigurationError, DashboardError
from life_dashboard.services.metrics import format_number
from life_dashboard.services.shell import TABS
from life_dashboard.services.withings_sync import BodyCompMeasurement, SyncResult

DEFAULT_BASE_URL = "http://localhost:8787"

_logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="life-dashboard", description="Life dashboard utilities"
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser(
        "sync-withings", help="Upsert the latest Withings measurement into Notion"
    )
    summary = commands.add_parser(
        "summary", help="Print the KPI cards of a tab from a running backend"
    )
    summary.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Backend URL (default: {DEFAULT_BASE_URL})",
    )
    summary.add_argument("--tab", choices=TABS, default=TABS[0], help="Tab to show")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    settings = Settings()
    try:
        if args.command == "sync-withings":
            return asyncio.run(_sync_withings(settings))
        return asyncio.run(_summary(settings, args.base_url, args.tab))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except DashboardError:
        _logger.exception("Command %s failed", args.command)
        return 1


async def _sync_withings(settings: Settings) -> int:
    service, close_resources = build_sync_service(settings)
    try:
        result = await service.run()
    finally:
        await close_resources()
    if result.mapped is None:
        print("No Withings body comp measurements found.")
        return 0
    print(json.dumps(sync_summary(result, settings.withings_token_path), indent=2))
    return 0


async def _summary(settings: Settings, base_url: str, tab: str) -> int:
    shell, close_resources = build_shell(settings, base_url)
    try:
        await shell.refresh()
    finally:
        await close_resources()
    if shell.error:
        print(f"Error: {shell.error}", file=sys.stderr)
    for path, message in shell.source_errors.items():
        print(f"Warning: {path}: {message}", file=sys.stderr)
    for card in shell.cards(tab):
        print(f"{card.label}: {format_number(card.value)}{card.suffix} ({card.sub})")
    return 1 if shell.error else 0


def sync_summary(result: SyncResult, token_path: str) -> dict[str, object]:
    """JSON report of a sync run."""
    upsert: dict[str, object] = {"mode": result.mode}
    if result.page_id:
        upsert["pageId"] = result.page_id
    return {
        "ok": True,
        "mapped": _measurement_json(result.mapped) if result.mapped else None,
        "upsert": upsert,
        "tokenStatePath": token_path,
    }


def _measurement_json(measurement: BodyCompMeasurement) -> dict[str, object]:
    return {
        "date": measurement.date,
        "weight": measurement.weight,
        "bodyFat": measurement.body_fat,
        "muscleMass": measurement.muscle_mass,
        "leanMass": measurement.lean_mass,
        "bmr": measurement.bmr,
    }


if __name__ == "__main__":
    sys.exit(main())
