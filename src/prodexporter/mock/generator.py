"""
Mock factory stats generator.

Produces fake but plausible per-item production figures so we can develop
and test without a running game server. Items and rates are loosely based
on an early-game iron line.
"""

import math
import random
from typing import List

from prodexporter.metrics import ProductionDetail

# item -> (production capacity, consumption capacity), items per minute
DEFAULT_ITEMS = {
    "IronOre": (240.0, 180.0),
    "IronIngot": (180.0, 150.0),
    "IronPlate": (60.0, 30.0),
    "IronRod": (60.0, 45.0),
    "Screw": (160.0, 120.0),
    "ReinforcedIronPlate": (5.0, 0.0),
}


class FactorySimulator:

    def __init__(self, seed: int = 42, items: dict = None):
        self._rng = random.Random(seed)
        self._tick = 0
        self._items = dict(items if items is not None else DEFAULT_ITEMS)

    def snapshot(self) -> List[ProductionDetail]:
        """Generate one reading, advancing the simulation clock."""
        self._tick += 1
        t = self._tick
        details = []

        for i, (name, (prod_cap, cons_cap)) in enumerate(self._items.items()):
            # Each item drifts on its own phase so they don't move in lockstep
            load = 0.75 + 0.2 * math.sin(t * 0.1 + i)
            # Occasional belt jam drops output for a tick
            if self._rng.random() > 0.95:
                load *= 0.3

            produced = max(0.0, prod_cap * load + self._rng.gauss(0, prod_cap * 0.02))
            produced = min(produced, prod_cap)
            consumed = min(cons_cap, produced * self._rng.uniform(0.8, 1.0)) if cons_cap else 0.0

            details.append(ProductionDetail(
                item_name=name,
                production_capacity=prod_cap,
                production_percent=round(100 * produced / prod_cap, 1) if prod_cap else 0.0,
                consumption_capacity=cons_cap,
                consumption_percent=round(100 * consumed / cons_cap, 1) if cons_cap else 0.0,
                current_production=round(produced, 2),
                current_consumption=round(consumed, 2),
            ))

        return details
