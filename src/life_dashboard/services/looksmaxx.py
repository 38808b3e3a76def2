"""Looksmaxx service over four auxiliary data sources."""

import asyncio
from dataclasses import dataclass

from life_dashboard.adapters.notion_client import NotionClient
from life_dashboard.domain.records import LooksmaxxPayload
from life_dashboard.services.mappers import map_looks_entry, map_looks_goal
from life_dashboard.services.payloads import utc_timestamp

LATEST_LIMIT = 5


@dataclass(frozen=True)
class LooksSources:
    """Data source ids of the looksmaxx workspace."""

    daily: str
    fitness: str
    products: str
    goals: str


@dataclass
class LooksmaxxService:
    """Count recent rows per source and surface the latest daily logs and goals."""

    client: NotionClient | None
    sources: LooksSources
    page_size: int = 10

    async def load(self) -> LooksmaxxPayload:
        if self.client is None:
            return empty_looksmaxx()
        daily, fitness, products, goals = await asyncio.gather(
            self.client.query_data_source(self.sources.daily, self.page_size),
            self.client.query_data_source(self.sources.fitness, self.page_size),
            self.client.query_data_source(self.sources.products, self.page_size),
            self.client.query_data_source(self.sources.goals, self.page_size),
        )
        return LooksmaxxPayload(
            updated_at=utc_timestamp(),
            daily_count=len(daily),
            fitness_count=len(fitness),
            products_count=len(products),
            goals_count=len(goals),
            latest_daily=[map_looks_entry(page) for page in daily[:LATEST_LIMIT]],
            latest_goals=[map_looks_goal(page) for page in goals[:LATEST_LIMIT]],
        )


def empty_looksmaxx(error: str | None = None) -> LooksmaxxPayload:
    return LooksmaxxPayload(updated_at=utc_timestamp(), error=error)
