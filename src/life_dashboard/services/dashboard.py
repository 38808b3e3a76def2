"""Dashboard service combining meals, body composition and training."""

import asyncio
import logging
from dataclasses import dataclass

from life_dashboard.adapters.notion_client import NotionClient
from life_dashboard.domain.errors import ConfigurationError
from life_dashboard.domain.records import DashboardPayload
from life_dashboard.services.mappers import map_body_comp, map_meal, map_training
from life_dashboard.services.payloads import utc_timestamp

MISSING_CONFIG_MESSAGE = (
    "Missing Notion env vars. Set NOTION_TOKEN, NOTION_DB_MEALS, "
    "NOTION_DB_BODYCOMP, NOTION_DB_TRAINING in .env"
)

_logger = logging.getLogger(__name__)


@dataclass
class DashboardService:
    """Load the three primary data sources in parallel."""

    client: NotionClient | None
    meals_source_id: str
    body_comp_source_id: str
    training_source_id: str
    page_size: int = 100

    def is_configured(self) -> bool:
        return self.client is not None and all(
            (self.meals_source_id, self.body_comp_source_id, self.training_source_id)
        )

    async def load(self) -> DashboardPayload:
        """Query meals, body composition and training and map every page.

        Raises ConfigurationError when the token or a data source id is
        missing. Upstream failures surface as UpstreamCallError.
        """
        if self.client is None or not self.is_configured():
            raise ConfigurationError(MISSING_CONFIG_MESSAGE)

        meal_pages, body_pages, training_pages = await asyncio.gather(
            self.client.query_data_source(self.meals_source_id, self.page_size),
            self.client.query_data_source(self.body_comp_source_id, self.page_size),
            self.client.query_data_source(self.training_source_id, self.page_size),
        )
        _logger.info(
            "Dashboard loaded: meals=%s body_comp=%s training=%s",
            len(meal_pages),
            len(body_pages),
            len(training_pages),
        )
        return DashboardPayload(
            updated_at=utc_timestamp(),
            meals=[map_meal(page) for page in meal_pages],
            body_comp=[map_body_comp(page) for page in body_pages],
            training=[map_training(page) for page in training_pages],
        )
