"""Portfolio snapshot service backed by an optional JSON file."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from life_dashboard.services.payloads import utc_timestamp

_logger = logging.getLogger(__name__)


@dataclass
class PortfolioService:
    """Serve the portfolio file, or a built-in sample when it is unusable."""

    path: Path | None

    def load(self) -> object:
        """Return the parsed file contents or the fallback snapshot."""
        if self.path is None or not self.path.is_file():
            return fallback_portfolio()
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            _logger.info("Portfolio file %s is unreadable; using fallback", self.path)
            return fallback_portfolio()


def fallback_portfolio() -> dict[str, object]:
    """Sample snapshot shown until a real portfolio file exists."""
    return {
        "updatedAt": utc_timestamp(),
        "totalValue": 9575.04,
        "dailyPnl": 25.22,
        "dailyPnlPct": 0.26,
        "allocation": [
            {"name": "Stocks", "value": 78},
            {"name": "Crypto", "value": 17},
            {"name": "Cash", "value": 5},
        ],
        "performance": [
            {"date": "2026-02-11", "label": "Feb 11", "value": 9480},
            {"date": "2026-02-12", "label": "Feb 12", "value": 9512},
            {"date": "2026-02-13", "label": "Feb 13", "value": 9468},
            {"date": "2026-02-14", "label": "Feb 14", "value": 9525},
            {"date": "2026-02-15", "label": "Feb 15", "value": 9541},
            {"date": "2026-02-16", "label": "Feb 16", "value": 9549},
            {"date": "2026-02-17", "label": "Feb 17", "value": 9575},
        ],
        "topPositions": [
            _position("TSLA", 6504, -1.24, "Stock"),
            _position("PLTR", 5298, 1.51, "Stock"),
            _position("BTC", 2166, -1.17, "Crypto"),
            _position("DOGE", 721, 0.88, "Crypto"),
        ],
    }


def _position(
    symbol: str, value: float, change_pct: float, asset_class: str
) -> dict[str, object]:
    return {
        "symbol": symbol,
        "value": value,
        "changePct": change_pct,
        "assetClass": asset_class,
    }
