"""JSON file storage for rotated Withings tokens."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from life_dashboard.services.withings_sync import TokenStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileTokenStore(TokenStore):
    """Keep the latest token set in a local JSON file."""

    path: Path

    def load(self) -> dict[str, object] | None:
        """Return the stored token set, or None when absent or unreadable."""
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            _logger.warning("Ignoring unreadable token file %s", self.path)
            return None
        return data if isinstance(data, dict) else None

    def save(self, tokens: dict[str, object]) -> None:
        """Write the token set through a sibling temp file, creating the parent."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_name(f"{self.path.name}.tmp")
        staging.write_text(json.dumps(tokens, indent=2), encoding="utf-8")
        staging.replace(self.path)
