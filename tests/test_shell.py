"""Tests for the presentation shell against the real app."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx
import pytest

from life_dashboard.adapters.dashboard_api_client import (
    ApiResponse,
    DashboardApi,
    HttpxDashboardApiClient,
)
from life_dashboard.api.app import create_app
from life_dashboard.domain.errors import UpstreamCallError
from life_dashboard.services.dashboard import MISSING_CONFIG_MESSAGE, DashboardService
from life_dashboard.services.shell import DashboardShell
from tests.conftest import (
    BODY_COMP_ID,
    LOOKS_SOURCES,
    MEALS_ID,
    ROADMAP_ID,
    TRAINING_ID,
    FakeNotionClient,
    date_prop,
    notion_page,
    number,
    select,
    title,
)

NOW = datetime(2026, 2, 7, 20, tzinfo=UTC)


def _meal(day: str, meal: str, calories: float, protein: float) -> dict[str, object]:
    return notion_page(
        {
            "Food": title(meal.lower()),
            "Date": date_prop(day),
            "Meal": select(meal),
            "Calories": number(calories),
            "Protein": number(protein),
        }
    )


def _body(day: str, weight: float, body_fat: float, muscle: float) -> dict[str, object]:
    return notion_page(
        {
            "Date": date_prop(day),
            "Weight (lbs)": number(weight),
            "Body Fat %": number(body_fat),
            "Muscle Mass (lbs)": number(muscle),
        }
    )


def _lift(day: str, exercise: str, weight: float) -> dict[str, object]:
    return notion_page(
        {
            "Exercise": select(exercise),
            "Date": date_prop(day),
            "Weight (lbs)": number(weight),
        }
    )


def _seed(notion_client: FakeNotionClient) -> None:
    notion_client.pages[MEALS_ID] = [
        _meal("2026-02-07", "Dinner", 1000, 50),
        _meal("2026-02-07", "Breakfast", 800, 60),
        _meal("2026-02-06", "Lunch", 2800, 170),
    ]
    notion_client.pages[BODY_COMP_ID] = [
        _body("2026-02-01", 164, 0.23, 72),
        _body("2026-02-07", 165.5, 0.225, 72.4),
    ]
    notion_client.pages[TRAINING_ID] = [
        _lift("2026-02-03", "Bench", 185),
        _lift("2026-02-06", "Bench", 195),
        _lift("2026-02-05", "Squat", 225),
        _lift("2026-02-01", "Squat", 235),
    ]
    notion_client.pages[ROADMAP_ID] = [
        notion_page(
            {
                "Milestone": title("Cut"),
                "Date": date_prop("2999-04-01"),
                "Target BF%": number(15),
                "Target Muscle": number(75),
            }
        )
    ]
    notion_client.pages[LOOKS_SOURCES.daily] = [
        notion_page({"Name": title("Day")}) for _ in range(3)
    ]


def _shell(container) -> DashboardShell:  # type: ignore[no-untyped-def]
    app = create_app(container)
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
    api = HttpxDashboardApiClient(base_url="http://testserver", http_client=http_client)
    return DashboardShell(api=api)


def _values(cards) -> list[tuple[str, float, str]]:  # type: ignore[no-untyped-def]
    return [(card.label, card.value, card.sub) for card in cards]


def test_refresh_loads_every_source(container, notion_client: FakeNotionClient) -> None:
    _seed(notion_client)
    shell = _shell(container)

    asyncio.run(shell.refresh())

    assert shell.error is None
    assert shell.loading is False
    assert shell.dashboard is not None
    assert len(shell.meals) == 3
    assert shell.roadmap is not None
    assert shell.roadmap.items[0].milestone == "Cut"
    assert shell.looksmaxx is not None
    assert shell.looksmaxx.daily_count == 3
    assert shell.portfolio is not None
    assert shell.portfolio["totalValue"] == 9575.04
    assert shell.source_errors == {}


def test_nutrition_cards_and_view(container, notion_client: FakeNotionClient) -> None:
    _seed(notion_client)
    shell = _shell(container)
    asyncio.run(shell.refresh())

    cards = shell.cards("Nutrition", NOW)
    view = shell.nutrition_view(NOW)

    assert _values(cards) == [
        ("Today's Calories", 1800, "Target 2800"),
        ("Today's Protein", 110, "Target 170g"),
        ("Cal Goal Hits", 1, "2 tracked days"),
        ("Protein Hits", 1, "2 tracked days"),
    ]
    assert cards[1].suffix == "g"
    assert [meal.meal for meal in view.today_meals] == ["Breakfast", "Dinner"]
    assert view.today == "2026-02-07"
    assert view.grade == "C"
    assert view.calorie_status == "red"
    assert view.protein_status == "red"
    assert view.insights[0] == "You need 1,000 more calories. Time for a solid dinner."
    assert view.weekly is not None
    assert view.weekly.compliance == 50
    assert view.bulk.current_weight == 165.5
    assert view.sync.last_meal_date == "2026-02-07"
    assert not view.trained_today


def test_other_tab_cards(container, notion_client: FakeNotionClient) -> None:
    _seed(notion_client)
    shell = _shell(container)
    asyncio.run(shell.refresh())

    assert _values(shell.cards("Body Comp")) == [
        ("Weight", 165.5, "+1.5 vs prior"),
        ("Body Fat", 22.5, "-0.5 vs prior"),
        ("Muscle", 72.4, "+0.4 vs prior"),
        ("Goal Gap", 2.5, "to 20% goal"),
    ]
    assert _values(shell.cards("Training")) == [
        ("Workout Days", 4, "Unique training dates"),
        ("Exercises", 2, "Tracked lifts"),
        ("Last Session", 6, "Feb 6"),
        ("Progressing", 1, "Exercises moving up"),
    ]
    assert _values(shell.cards("Roadmap")) == [
        ("Roadmap Items", 1, "Total milestones"),
        ("Next Milestone", 1, "Cut"),
        ("Target BF", 15, "Latest target"),
        ("Target Muscle", 75, "Latest target"),
    ]
    assert _values(shell.cards("Looksmaxx"))[0] == ("Daily Logs", 3, "Looksmaxx HQ")
    with pytest.raises(ValueError, match="Unknown tab"):
        shell.cards("Portfolio")


def test_cards_without_data_use_zero_defaults(container) -> None:
    shell = _shell(container)

    assert _values(shell.cards("Body Comp"))[0] == ("Weight", 0, "+0 vs prior")
    assert _values(shell.cards("Training"))[2] == ("Last Session", 0, "No data")
    assert _values(shell.cards("Roadmap"))[1] == ("Next Milestone", 0, "No upcoming")


def test_failed_refresh_keeps_previous_dashboard(
    container, notion_client: FakeNotionClient
) -> None:
    _seed(notion_client)
    shell = _shell(container)
    asyncio.run(shell.refresh())
    previous = shell.dashboard

    notion_client.failures[MEALS_ID] = UpstreamCallError("Notion is down")
    notion_client.pages[LOOKS_SOURCES.daily] = []
    asyncio.run(shell.refresh())

    assert shell.error == "Notion is down"
    assert shell.dashboard is previous
    assert shell.looksmaxx is not None
    assert shell.looksmaxx.daily_count == 0


def test_unconfigured_backend_reports_error_but_accepts_secondaries(
    container, notion_client: FakeNotionClient
) -> None:
    _seed(notion_client)
    container.dashboard_service = DashboardService(
        client=None,
        meals_source_id="",
        body_comp_source_id="",
        training_source_id="",
    )
    shell = _shell(container)

    asyncio.run(shell.refresh())

    assert shell.error == MISSING_CONFIG_MESSAGE
    assert shell.dashboard is None
    assert shell.roadmap is not None
    assert shell.looksmaxx is not None


def test_secondary_error_payloads_are_recorded(
    container, notion_client: FakeNotionClient
) -> None:
    _seed(notion_client)
    notion_client.failures[LOOKS_SOURCES.goals] = UpstreamCallError("boom")
    shell = _shell(container)

    asyncio.run(shell.refresh())

    assert shell.error is None
    assert shell.source_errors == {"/api/looksmaxx": "boom"}
    assert shell.looksmaxx is not None
    assert shell.looksmaxx.daily_count == 0


@dataclass
class ScriptedApi(DashboardApi):
    """API stub returning scripted responses per path."""

    responses: dict[str, ApiResponse | Exception]
    shell: DashboardShell | None = None
    loading_seen: list[bool] = field(default_factory=list)

    async def get_json(self, path: str) -> ApiResponse:
        if self.shell is not None:
            self.loading_seen.append(self.shell.loading)
        result = self.responses[path]
        if isinstance(result, Exception):
            raise result
        return result


def test_secondary_sources_are_accepted_independently() -> None:
    api = ScriptedApi(
        responses={
            "/api/dashboard": ApiResponse(200, {"meals": [], "updatedAt": "x"}),
            "/api/roadmap": UpstreamCallError("connection refused"),
            "/api/looksmaxx": ApiResponse(500, {"error": "bad gateway"}),
            "/api/portfolio": ApiResponse(200, {"totalValue": 5}),
        }
    )
    shell = DashboardShell(api=api)
    api.shell = shell

    asyncio.run(shell.refresh())

    assert api.loading_seen == [True, True, True, True]
    assert shell.loading is False
    assert shell.error is None
    assert shell.dashboard is not None
    assert shell.roadmap is None
    assert shell.looksmaxx is None
    assert shell.portfolio == {"totalValue": 5}


def test_dashboard_transport_failure_sets_error() -> None:
    api = ScriptedApi(
        responses={
            "/api/dashboard": UpstreamCallError("Request to /api/dashboard failed"),
            "/api/roadmap": ApiResponse(200, {"items": []}),
            "/api/looksmaxx": ApiResponse(200, {"dailyCount": 2}),
            "/api/portfolio": ApiResponse(200, {}),
        }
    )
    shell = DashboardShell(api=api)

    asyncio.run(shell.refresh())

    assert shell.error == "Request to /api/dashboard failed"
    assert shell.dashboard is None
    assert shell.looksmaxx is not None
    assert shell.looksmaxx.daily_count == 2
