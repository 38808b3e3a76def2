"""Roadmap service."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from life_dashboard.adapters.notion_client import NotionClient
from life_dashboard.domain.records import RoadmapPayload
from life_dashboard.services.mappers import build_roadmap, map_roadmap_item
from life_dashboard.services.payloads import utc_timestamp


@dataclass
class RoadmapService:
    """Load milestones and derive phase counts and the upcoming slice."""

    client: NotionClient | None
    source_id: str
    page_size: int = 100

    async def load(self, today: date | None = None) -> RoadmapPayload:
        """Return the sorted roadmap, or an empty one when Notion is unconfigured."""
        if self.client is None or not self.source_id:
            return empty_roadmap()
        pages = await self.client.query_data_source(self.source_id, self.page_size)
        current_day = today or datetime.now(tz=UTC).date()
        items, by_phase, next_milestones = build_roadmap(
            [map_roadmap_item(page) for page in pages], current_day.isoformat()
        )
        return RoadmapPayload(
            updated_at=utc_timestamp(),
            items=items,
            by_phase=by_phase,
            next_milestones=next_milestones,
        )


def empty_roadmap(error: str | None = None) -> RoadmapPayload:
    return RoadmapPayload(updated_at=utc_timestamp(), error=error)
