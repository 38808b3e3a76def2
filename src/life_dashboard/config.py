"""Application configuration."""

import os
import re
from datetime import date

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
_NON_ID_CHARS = re.compile(r"[^a-f0-9-]")

_ID_FIELDS = (
    "notion_db_meals",
    "notion_db_bodycomp",
    "notion_db_training",
    "notion_db_roadmap",
    "notion_db_looks_daily",
    "notion_db_looks_fitness",
    "notion_db_looks_products",
    "notion_db_looks_goals",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    notion_token: str | None = None
    notion_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2025-09-03"
    notion_db_meals: str = ""
    notion_db_bodycomp: str = ""
    notion_db_training: str = ""
    notion_db_roadmap: str = "f392999d-8c9d-47a2-ad9d-229da2d5e6a0"
    notion_db_looks_daily: str = "fc92cf89-d93f-48e8-bb23-217e6d001716"
    notion_db_looks_fitness: str = "c1f09f44-3490-418d-9da3-8177895062ec"
    notion_db_looks_products: str = "de7c9cbc-0706-4400-8402-c9c873904e70"
    notion_db_looks_goals: str = "0d5d9ab6-8907-40a5-becd-965bbf6bd13a"
    portfolio_json_path: str = "data/portfolio.json"
    withings_client_id: str | None = None
    withings_client_secret: str | None = None
    withings_refresh_token: str | None = None
    withings_token_path: str = "data/withings-token.json"
    withings_base_url: str = "https://wbsapi.withings.net"
    cors_allow_origins: str | None = "*"
    static_dir: str | None = None
    dashboard_timezone: str = "UTC"
    target_calories: float = Field(default=2800, gt=0)
    target_protein: float = Field(default=170, gt=0)
    target_calories_min: float = 2700
    target_protein_min: float = 160
    target_body_fat: float = 20
    bulk_start_date: date = date(2026, 1, 7)
    bulk_end_date: date = date(2026, 3, 23)
    bulk_start_weight: float = 161
    bulk_target_weight: float = 170
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
        frozen=True,
    )

    @field_validator(*_ID_FIELDS, mode="before")
    @classmethod
    def _normalize_ids(cls, value: object) -> str:
        return normalize_id(value if isinstance(value, str) else None)


def normalize_id(raw: str | None) -> str:
    """Lower-case a Notion identifier and drop anything but hex digits and dashes."""
    return _NON_ID_CHARS.sub("", (raw or "").lower()).strip()


def parse_allowed_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from env."""
    if raw is None:
        return []
    cleaned = raw.strip()
    if cleaned == "*":
        return ["*"]
    origins: list[str] = []
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if value:
            origins.append(value)
    return origins
