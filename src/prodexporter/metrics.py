"""
Core record definitions for prodexporter.

These mirror what the remote monitoring endpoint returns at /getProdStats,
one object per item the factory produces or consumes.
"""

from dataclasses import dataclass
from typing import Optional


def _round(value: Optional[float], digits: int = 2) -> Optional[float]:
    return None if value is None else round(value, digits)


@dataclass
class ProductionDetail:
    """Production and consumption figures for a single item at one poll.

    Numeric fields are None when the endpoint left them out; the update
    step skips those instead of writing zero.
    """

    item_name: str

    # Capacity (items per minute) and how much of it is in use (percent)
    production_capacity: Optional[float] = None
    production_percent: Optional[float] = None
    consumption_capacity: Optional[float] = None
    consumption_percent: Optional[float] = None

    # Actual throughput (items per minute)
    current_production: Optional[float] = None
    current_consumption: Optional[float] = None

    def summary(self) -> dict:
        """Return a plain dict for display."""
        return {
            "item_name": self.item_name,
            "production_capacity": _round(self.production_capacity),
            "production_pct": _round(self.production_percent, 1),
            "consumption_capacity": _round(self.consumption_capacity),
            "consumption_pct": _round(self.consumption_percent, 1),
            "produced_per_min": _round(self.current_production),
            "consumed_per_min": _round(self.current_consumption),
        }
