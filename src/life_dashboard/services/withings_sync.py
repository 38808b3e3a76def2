"""One-way sync of the latest Withings body composition into Notion."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

from life_dashboard.adapters.notion_client import NotionClient
from life_dashboard.adapters.withings_client import WithingsClient
from life_dashboard.domain.errors import ConfigurationError, UpstreamCallError
from life_dashboard.services.metrics import round_half_up
from life_dashboard.services.payloads import utc_timestamp

KG_TO_LBS = 2.2046226218
LOOKBACK_DAYS = 35

# Withings measure type ids.
MEASURE_WEIGHT = 1
MEASURE_FAT_FREE_MASS = 5
MEASURE_FAT_RATIO = 6
MEASURE_MUSCLE_MASS = 76
MEASURE_BMR = 226

_logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    """Persistence interface for the rotated Withings token set."""

    def load(self) -> dict[str, object] | None:
        """Return the last saved token set, if any."""

    def save(self, tokens: dict[str, object]) -> None:
        """Persist a token set."""


@dataclass(frozen=True)
class BodyCompMeasurement:
    """A Withings measure group converted to pounds and percent."""

    date: str
    weight: float | None
    body_fat: float | None
    muscle_mass: float | None
    lean_mass: float | None
    bmr: int | None


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one sync run."""

    mapped: BodyCompMeasurement | None
    mode: str
    page_id: str | None = None


@dataclass
class WithingsSyncService:
    """Refresh Withings credentials and upsert the newest measurement by date."""

    withings_client: WithingsClient
    notion_client: NotionClient
    token_store: TokenStore
    body_comp_source_id: str
    refresh_token: str | None = None
    clock: Callable[[], datetime] = field(default=lambda: datetime.now(tz=UTC))

    async def run(self) -> SyncResult:
        tokens = await self.refresh_tokens()
        access_token = tokens.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise UpstreamCallError("Withings returned no access token")

        group = await self.fetch_latest_group(access_token)
        if group is None:
            _logger.info("No Withings body comp measurements found")
            return SyncResult(mapped=None, mode="skipped")

        measurement = map_measure_group(group)
        mode, page_id = await self.upsert(measurement)
        _logger.info("Synced Withings measurement for %s (%s)", measurement.date, mode)
        return SyncResult(mapped=measurement, mode=mode, page_id=page_id)

    async def refresh_tokens(self) -> dict[str, object]:
        """Exchange the newest known refresh token and persist the rotated set.

        Withings invalidates a refresh token once it is used, so the stored
        token wins over the configured one.
        """
        stored = self.token_store.load() or {}
        refresh_token = stored.get("refresh_token") or self.refresh_token
        if not isinstance(refresh_token, str) or not refresh_token:
            raise ConfigurationError("Missing env var: WITHINGS_REFRESH_TOKEN")

        body = await self.withings_client.refresh_access_token(refresh_token)
        _logger.info("Refreshed Withings access token")
        self.token_store.save(
            {
                "updatedAt": utc_timestamp(self.clock()),
                "access_token": body.get("access_token"),
                "refresh_token": body.get("refresh_token"),
                "expires_in": body.get("expires_in"),
            }
        )
        return body

    async def fetch_latest_group(self, access_token: str) -> dict[str, object] | None:
        """Return the most recent measure group of the lookback window."""
        since = self.clock() - timedelta(days=LOOKBACK_DAYS)
        groups = await self.withings_client.get_measure_groups(
            access_token, int(since.timestamp())
        )
        _logger.info("Fetched %d Withings measure groups", len(groups))
        if not groups:
            return None
        return max(groups, key=_group_timestamp)

    async def upsert(self, measurement: BodyCompMeasurement) -> tuple[str, str | None]:
        """Update the page dated like the measurement, or create one."""
        existing = await self.notion_client.query_data_source(
            self.body_comp_source_id,
            page_size=1,
            filter_={"property": "Date", "date": {"equals": measurement.date}},
        )
        properties = body_comp_properties(measurement, self.clock())
        if existing:
            page_id = str(existing[0].get("id", ""))
            await self.notion_client.update_page(page_id, properties)
            return "update", page_id

        properties["Date Entry"] = {
            "title": [{"text": {"content": _entry_title(measurement.date)}}]
        }
        created = await self.notion_client.create_page(
            self.body_comp_source_id, properties
        )
        page_id = created.get("id")
        return "create", page_id if isinstance(page_id, str) else None


def measure_value(measures: list[dict[str, object]], measure_type: int) -> float | None:
    """Decode ``value * 10**unit`` for the first measure of a type."""
    for measure in measures:
        if measure.get("type") != measure_type:
            continue
        value = measure.get("value")
        unit = measure.get("unit", 0)
        if isinstance(value, int | float) and isinstance(unit, int):
            return value * 10**unit
    return None


def kg_to_lbs(kg: float) -> float:
    return round(kg * KG_TO_LBS, 1)


def ratio_to_percent(value: float) -> float:
    """Convert a 0-1 ratio to percent; values already in percent are kept."""
    if value <= 1:
        return round(value * 100, 1)
    return round(value, 1)


def map_measure_group(group: dict[str, object]) -> BodyCompMeasurement:
    raw_measures = group.get("measures")
    measures = (
        [m for m in raw_measures if isinstance(m, dict)]
        if isinstance(raw_measures, list)
        else []
    )
    weight_kg = measure_value(measures, MEASURE_WEIGHT)
    fat_ratio = measure_value(measures, MEASURE_FAT_RATIO)
    muscle_kg = measure_value(measures, MEASURE_MUSCLE_MASS)
    lean_kg = measure_value(measures, MEASURE_FAT_FREE_MASS)
    bmr = measure_value(measures, MEASURE_BMR)
    measured_at = datetime.fromtimestamp(_group_timestamp(group), tz=UTC)
    return BodyCompMeasurement(
        date=measured_at.date().isoformat(),
        weight=kg_to_lbs(weight_kg) if weight_kg else None,
        body_fat=ratio_to_percent(fat_ratio) if fat_ratio is not None else None,
        muscle_mass=kg_to_lbs(muscle_kg) if muscle_kg else None,
        lean_mass=kg_to_lbs(lean_kg) if lean_kg else None,
        bmr=round_half_up(bmr) if bmr is not None else None,
    )


def body_comp_properties(
    measurement: BodyCompMeasurement, synced_at: datetime
) -> dict[str, object]:
    """Build Notion properties, leaving out measures the scale did not report."""
    body_fat_fraction = (
        round(measurement.body_fat / 100, 4)
        if measurement.body_fat is not None
        else None
    )
    numbers = {
        "Weight (lbs)": measurement.weight,
        "Body Fat %": body_fat_fraction,
        "Muscle Mass (lbs)": measurement.muscle_mass,
        "Lean Mass (lbs)": measurement.lean_mass,
        "BMR (kcal)": measurement.bmr,
    }
    properties: dict[str, object] = {"Date": {"date": {"start": measurement.date}}}
    for name, value in numbers.items():
        if value is not None:
            properties[name] = {"number": value}
    stamp = f"{synced_at:%Y-%m-%d %H:%M}"
    properties["Notes"] = {
        "rich_text": [
            {
                "type": "text",
                "text": {"content": f"Synced from Withings on {stamp}"},
            }
        ]
    }
    return properties


def _group_timestamp(group: dict[str, object]) -> int:
    value = group.get("date")
    return value if isinstance(value, int) else 0


def _entry_title(day: str) -> str:
    parsed = date.fromisoformat(day)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"
