"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from life_dashboard.adapters.notion_client import NotionClient
from life_dashboard.adapters.withings_client import WithingsClient
from life_dashboard.config import Settings
from life_dashboard.containers import AppContainer
from life_dashboard.services.dashboard import DashboardService
from life_dashboard.services.looksmaxx import LooksmaxxService, LooksSources
from life_dashboard.services.portfolio import PortfolioService
from life_dashboard.services.roadmap import RoadmapService
from life_dashboard.services.withings_sync import TokenStore

MEALS_ID = "aaaa-0001"
BODY_COMP_ID = "bbbb-0002"
TRAINING_ID = "cccc-0003"
ROADMAP_ID = "dddd-0004"
LOOKS_SOURCES = LooksSources(
    daily="eeee-0005",
    fitness="ffff-0006",
    products="abab-0007",
    goals="cdcd-0008",
)


def title(text: str) -> dict[str, object]:
    return {"title": [{"plain_text": text}]}


def rich_text(text: str) -> dict[str, object]:
    return {"rich_text": [{"plain_text": text}]}


def number(value: float | None) -> dict[str, object]:
    return {"number": value}


def date_prop(start: str | None) -> dict[str, object]:
    return {"date": {"start": start} if start else None}


def select(name: str | None) -> dict[str, object]:
    return {"select": {"name": name} if name else None}


def notion_page(
    properties: dict[str, object], page_id: str = "page-1"
) -> dict[str, object]:
    return {"id": page_id, "properties": properties}


@dataclass
class FakeNotionClient(NotionClient):
    """In-memory Notion client that records writes."""

    pages: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    queries: list[tuple[str, int, dict[str, object] | None]] = field(
        default_factory=list
    )
    created: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    updated: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    async def query_data_source(
        self,
        data_source_id: str,
        page_size: int = 100,
        filter_: dict[str, object] | None = None,
    ) -> list[dict[str, object]]:
        self.queries.append((data_source_id, page_size, filter_))
        if data_source_id in self.failures:
            raise self.failures[data_source_id]
        rows = self.pages.get(data_source_id, [])
        if filter_ is not None:
            wanted = filter_["date"]["equals"]  # type: ignore[index]
            rows = [row for row in rows if _page_date(row) == wanted]
        return rows[:page_size]

    async def create_page(
        self, data_source_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        self.created.append((data_source_id, properties))
        return {"id": f"created-{len(self.created)}"}

    async def update_page(
        self, page_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        self.updated.append((page_id, properties))
        return {"id": page_id}


def _page_date(page: dict[str, object]) -> str | None:
    date = page["properties"].get("Date", {}).get("date")  # type: ignore[union-attr]
    return date.get("start") if date else None


@dataclass
class FakeWithingsClient(WithingsClient):
    """Withings client returning canned token and measure bodies."""

    groups: list[dict[str, object]] = field(default_factory=list)
    refreshed_with: list[str] = field(default_factory=list)
    last_update: int | None = None

    async def refresh_access_token(self, refresh_token: str) -> dict[str, object]:
        self.refreshed_with.append(refresh_token)
        return {
            "access_token": "access-1",
            "refresh_token": f"rotated-{len(self.refreshed_with)}",
            "expires_in": 10800,
        }

    async def get_measure_groups(
        self, access_token: str, last_update: int
    ) -> list[dict[str, object]]:
        assert access_token == "access-1"
        self.last_update = last_update
        return self.groups


@dataclass
class InMemoryTokenStore(TokenStore):
    tokens: dict[str, object] | None = None

    def load(self) -> dict[str, object] | None:
        return self.tokens

    def save(self, tokens: dict[str, object]) -> None:
        self.tokens = tokens


@pytest.fixture
def settings() -> Settings:
    return Settings(
        notion_token="secret-token",
        notion_db_meals=MEALS_ID,
        notion_db_bodycomp=BODY_COMP_ID,
        notion_db_training=TRAINING_ID,
        portfolio_json_path="",
    )


@pytest.fixture
def notion_client() -> FakeNotionClient:
    return FakeNotionClient()


@pytest.fixture
def container(settings: Settings, notion_client: FakeNotionClient) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        notion_client=notion_client,
        dashboard_service=DashboardService(
            client=notion_client,
            meals_source_id=MEALS_ID,
            body_comp_source_id=BODY_COMP_ID,
            training_source_id=TRAINING_ID,
        ),
        roadmap_service=RoadmapService(client=notion_client, source_id=ROADMAP_ID),
        looksmaxx_service=LooksmaxxService(client=notion_client, sources=LOOKS_SOURCES),
        portfolio_service=PortfolioService(None),
        close_resources=close_resources,
    )
