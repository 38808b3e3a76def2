"""Tests for the Withings to Notion sync job."""

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from life_dashboard.adapters.token_store import JsonFileTokenStore
from life_dashboard.domain.errors import ConfigurationError
from life_dashboard.services.withings_sync import (
    BodyCompMeasurement,
    WithingsSyncService,
    body_comp_properties,
    kg_to_lbs,
    map_measure_group,
    measure_value,
    ratio_to_percent,
)
from tests.conftest import (
    BODY_COMP_ID,
    FakeNotionClient,
    FakeWithingsClient,
    InMemoryTokenStore,
    date_prop,
    notion_page,
)

NOW = datetime(2026, 2, 8, 12, tzinfo=UTC)
FEB_7_10AM = 1770458400
FEB_5_LATE = 1770334200

FULL_GROUP = {
    "date": FEB_7_10AM,
    "measures": [
        {"type": 1, "value": 70000, "unit": -3},
        {"type": 6, "value": 185, "unit": -1},
        {"type": 76, "value": 32000, "unit": -3},
        {"type": 5, "value": 57050, "unit": -3},
        {"type": 226, "value": 17505, "unit": -1},
    ],
}


def _service(
    withings: FakeWithingsClient,
    notion: FakeNotionClient,
    store: InMemoryTokenStore,
    refresh_token: str | None = "env-refresh",
) -> WithingsSyncService:
    return WithingsSyncService(
        withings_client=withings,
        notion_client=notion,
        token_store=store,
        body_comp_source_id=BODY_COMP_ID,
        refresh_token=refresh_token,
        clock=lambda: NOW,
    )


def test_unit_conversions() -> None:
    assert kg_to_lbs(70) == 154.3
    assert ratio_to_percent(0.185) == 18.5
    assert ratio_to_percent(18.5) == 18.5
    assert measure_value([{"type": 1, "value": 725, "unit": -1}], 1) == 72.5
    assert measure_value([{"type": 1, "value": 725, "unit": -1}], 6) is None


def test_map_measure_group_converts_every_measure() -> None:
    measurement = map_measure_group(FULL_GROUP)

    assert measurement == BodyCompMeasurement(
        date="2026-02-07",
        weight=154.3,
        body_fat=18.5,
        muscle_mass=70.5,
        lean_mass=125.8,
        bmr=1751,
    )


def test_body_comp_properties_omit_missing_measures() -> None:
    measurement = BodyCompMeasurement(
        date="2026-02-07",
        weight=154.3,
        body_fat=None,
        muscle_mass=None,
        lean_mass=None,
        bmr=None,
    )

    properties = body_comp_properties(measurement, NOW)

    assert properties["Date"] == {"date": {"start": "2026-02-07"}}
    assert properties["Weight (lbs)"] == {"number": 154.3}
    assert "Body Fat %" not in properties
    assert "BMR (kcal)" not in properties
    notes = properties["Notes"]["rich_text"][0]["text"]  # type: ignore[index]
    assert notes == {"content": "Synced from Withings on 2026-02-08 12:00"}


def test_sync_creates_page_when_date_is_new() -> None:
    withings = FakeWithingsClient(groups=[FULL_GROUP])
    notion = FakeNotionClient()
    store = InMemoryTokenStore()

    result = asyncio.run(_service(withings, notion, store).run())

    assert result.mode == "create"
    assert result.page_id == "created-1"
    assert withings.refreshed_with == ["env-refresh"]
    assert withings.last_update == int((NOW - timedelta(days=35)).timestamp())
    assert notion.queries == [
        (
            BODY_COMP_ID,
            1,
            {"property": "Date", "date": {"equals": "2026-02-07"}},
        )
    ]
    source_id, properties = notion.created[0]
    assert source_id == BODY_COMP_ID
    assert properties["Date Entry"] == {
        "title": [{"text": {"content": "Feb 7, 2026"}}]
    }
    assert properties["Body Fat %"] == {"number": 0.185}
    assert properties["Muscle Mass (lbs)"] == {"number": 70.5}
    assert store.tokens is not None
    assert store.tokens["refresh_token"] == "rotated-1"
    assert store.tokens["access_token"] == "access-1"
    assert store.tokens["expires_in"] == 10800
    assert store.tokens["updatedAt"] == "2026-02-08T12:00:00.000Z"


def test_sync_updates_same_date_page_with_stored_token() -> None:
    withings = FakeWithingsClient(groups=[FULL_GROUP])
    notion = FakeNotionClient(
        pages={
            BODY_COMP_ID: [
                notion_page({"Date": date_prop("2026-02-06")}, page_id="other"),
                notion_page({"Date": date_prop("2026-02-07")}, page_id="existing-1"),
            ]
        }
    )
    store = InMemoryTokenStore(tokens={"refresh_token": "stored-refresh"})

    result = asyncio.run(_service(withings, notion, store).run())

    assert result.mode == "update"
    assert result.page_id == "existing-1"
    assert withings.refreshed_with == ["stored-refresh"]
    assert notion.created == []
    page_id, properties = notion.updated[0]
    assert page_id == "existing-1"
    assert "Date Entry" not in properties
    assert properties["Weight (lbs)"] == {"number": 154.3}


def test_sync_picks_most_recent_group() -> None:
    older = {"date": FEB_5_LATE, "measures": [{"type": 1, "value": 69, "unit": 0}]}
    withings = FakeWithingsClient(groups=[FULL_GROUP, older])
    notion = FakeNotionClient()

    result = asyncio.run(_service(withings, notion, InMemoryTokenStore()).run())

    assert result.mapped is not None
    assert result.mapped.date == "2026-02-07"
    assert result.mapped.weight == 154.3


def test_sync_without_measurements_skips_notion() -> None:
    notion = FakeNotionClient()

    result = asyncio.run(
        _service(FakeWithingsClient(), notion, InMemoryTokenStore()).run()
    )

    assert result.mode == "skipped"
    assert result.mapped is None
    assert notion.queries == []


def test_sync_requires_a_refresh_token() -> None:
    service = _service(
        FakeWithingsClient(), FakeNotionClient(), InMemoryTokenStore(), None
    )

    with pytest.raises(ConfigurationError, match="WITHINGS_REFRESH_TOKEN"):
        asyncio.run(service.run())


def test_json_token_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileTokenStore(tmp_path / "nested" / "withings-token.json")

    assert store.load() is None
    store.save({"refresh_token": "r1", "expires_in": 10800})

    assert store.load() == {"refresh_token": "r1", "expires_in": 10800}


def test_json_token_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "withings-token.json"
    path.write_text("{oops", encoding="utf-8")

    assert JsonFileTokenStore(path).load() is None


def test_json_token_store_replaces_file_whole(tmp_path: Path) -> None:
    path = tmp_path / "withings-token.json"
    store = JsonFileTokenStore(path)
    store.save({"refresh_token": "r1"})
    # a write interrupted before the rename leaves the previous tokens intact
    (tmp_path / "withings-token.json.tmp").write_text("{trunc", encoding="utf-8")

    assert store.load() == {"refresh_token": "r1"}

    store.save({"refresh_token": "r2"})

    assert store.load() == {"refresh_token": "r2"}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["withings-token.json"]
