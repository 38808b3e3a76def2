"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

from life_dashboard.adapters.dashboard_api_client import HttpxDashboardApiClient
from life_dashboard.adapters.notion_client import HttpxNotionClient, NotionClient
from life_dashboard.adapters.token_store import JsonFileTokenStore
from life_dashboard.adapters.withings_client import HttpxWithingsClient
from life_dashboard.config import Settings
from life_dashboard.domain.errors import ConfigurationError
from life_dashboard.domain.metrics import BulkPlan, Targets
from life_dashboard.services.dashboard import DashboardService
from life_dashboard.services.looksmaxx import LooksmaxxService, LooksSources
from life_dashboard.services.portfolio import PortfolioService
from life_dashboard.services.roadmap import RoadmapService
from life_dashboard.services.shell import DashboardShell
from life_dashboard.services.withings_sync import WithingsSyncService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    notion_client: NotionClient | None
    dashboard_service: DashboardService
    roadmap_service: RoadmapService
    looksmaxx_service: LooksmaxxService
    portfolio_service: PortfolioService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    notion_client = (
        HttpxNotionClient.create(
            token=resolved_settings.notion_token,
            base_url=resolved_settings.notion_base_url,
            notion_version=resolved_settings.notion_version,
        )
        if resolved_settings.notion_token
        else None
    )
    dashboard_service = DashboardService(
        client=notion_client,
        meals_source_id=resolved_settings.notion_db_meals,
        body_comp_source_id=resolved_settings.notion_db_bodycomp,
        training_source_id=resolved_settings.notion_db_training,
    )
    roadmap_service = RoadmapService(
        client=notion_client, source_id=resolved_settings.notion_db_roadmap
    )
    looksmaxx_service = LooksmaxxService(
        client=notion_client,
        sources=LooksSources(
            daily=resolved_settings.notion_db_looks_daily,
            fitness=resolved_settings.notion_db_looks_fitness,
            products=resolved_settings.notion_db_looks_products,
            goals=resolved_settings.notion_db_looks_goals,
        ),
    )
    portfolio_path = resolved_settings.portfolio_json_path
    portfolio_service = PortfolioService(
        Path(portfolio_path) if portfolio_path else None
    )

    async def close_resources() -> None:
        if notion_client is not None:
            await notion_client.close()

    return AppContainer(
        settings=resolved_settings,
        notion_client=notion_client,
        dashboard_service=dashboard_service,
        roadmap_service=roadmap_service,
        looksmaxx_service=looksmaxx_service,
        portfolio_service=portfolio_service,
        close_resources=close_resources,
    )


def build_sync_service(
    settings: Settings,
) -> tuple[WithingsSyncService, Callable[[], Awaitable[None]]]:
    """Wire the Withings sync job, failing fast on missing credentials."""
    required = {
        "NOTION_TOKEN": settings.notion_token,
        "NOTION_DB_BODYCOMP": settings.notion_db_bodycomp,
        "WITHINGS_CLIENT_ID": settings.withings_client_id,
        "WITHINGS_CLIENT_SECRET": settings.withings_client_secret,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing env var: {', '.join(missing)}")

    notion_client = HttpxNotionClient.create(
        token=settings.notion_token or "",
        base_url=settings.notion_base_url,
        notion_version=settings.notion_version,
    )
    withings_client = HttpxWithingsClient.create(
        client_id=settings.withings_client_id or "",
        client_secret=settings.withings_client_secret or "",
        base_url=settings.withings_base_url,
    )
    service = WithingsSyncService(
        withings_client=withings_client,
        notion_client=notion_client,
        token_store=JsonFileTokenStore(Path(settings.withings_token_path)),
        body_comp_source_id=settings.notion_db_bodycomp,
        refresh_token=settings.withings_refresh_token,
    )

    async def close_resources() -> None:
        await withings_client.close()
        await notion_client.close()

    return service, close_resources


def build_shell(
    settings: Settings, base_url: str
) -> tuple[DashboardShell, Callable[[], Awaitable[None]]]:
    """Wire a presentation shell against a running backend."""
    api = HttpxDashboardApiClient.create(base_url)
    shell = DashboardShell(
        api=api,
        targets=Targets(
            calories=settings.target_calories,
            protein=settings.target_protein,
            calories_min=settings.target_calories_min,
            protein_min=settings.target_protein_min,
            body_fat_goal=settings.target_body_fat,
        ),
        plan=BulkPlan(
            start_date=settings.bulk_start_date,
            end_date=settings.bulk_end_date,
            start_weight=settings.bulk_start_weight,
            target_weight=settings.bulk_target_weight,
        ),
        timezone=ZoneInfo(settings.dashboard_timezone),
    )
    return shell, api.close
