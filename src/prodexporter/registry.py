"""
Gauge registry backed by prometheus_client.

Wraps a CollectorRegistry so the collector can be handed its own registry
in tests while the CLI shares the process-wide one that
start_http_server() exposes.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from prometheus_client import REGISTRY, CollectorRegistry, Gauge, generate_latest

from prodexporter.errors import UpdateError

log = logging.getLogger(__name__)

ITEM_LABEL = "item_name"

# name -> help text for the six per-item families
PRODUCTION_GAUGES: Dict[str, str] = {
    "item_production_capacity_per_min": "The factory's capacity for the production of an item, per minute",
    "item_production_capacity_pc": "The percentage of an item's production capacity being used",
    "item_consumption_capacity_per_min": "The factory's capacity for the consumption of an item, per minute",
    "item_consumption_capacity_pc": "The percentage of an item's consumption capacity being used",
    "items_produced_per_min": "The number of an item being produced, per minute",
    "items_consumed_per_min": "The number of an item being consumed, per minute",
}


class GaugeHandle:
    """One labeled gauge family. Thin wrapper that turns prometheus_client
    errors into UpdateError."""

    def __init__(self, gauge: Gauge, name: str, label_names: Tuple[str, ...], registry: CollectorRegistry):
        self._gauge = gauge
        self._registry = registry
        self.name = name
        self.label_names = label_names

    def set_value(self, label_values: Sequence[str], value: float) -> None:
        if len(label_values) != len(self.label_names):
            raise UpdateError(
                f"{self.name}: expected {len(self.label_names)} label values, got {len(label_values)}"
            )
        # Convert before labels(): that call creates the series at 0.0
        try:
            value = float(value)
            self._gauge.labels(*label_values).set(value)
        except (TypeError, ValueError, OverflowError) as exc:
            raise UpdateError(f"{self.name}{{{', '.join(label_values)}}}: {exc}") from exc

    def get_value(self, label_values: Sequence[str]) -> Optional[float]:
        """Current value of one series, or None if it was never set."""
        labels = dict(zip(self.label_names, label_values))
        return self._registry.get_sample_value(self.name, labels)


@dataclass
class ProductionGauges:
    production_capacity: GaugeHandle
    production_percent: GaugeHandle
    consumption_capacity: GaugeHandle
    consumption_percent: GaugeHandle
    items_produced: GaugeHandle
    items_consumed: GaugeHandle


class MetricRegistry:

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self._registry = registry if registry is not None else CollectorRegistry()
        self._gauges: Dict[str, GaugeHandle] = {}
        self._lock = threading.Lock()
        self._production: Optional[ProductionGauges] = None

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._registry

    def get_or_create_gauge(self, name: str, documentation: str, label_names: Sequence[str]) -> GaugeHandle:
        """Register a gauge family once; later calls with the same name return the same handle."""
        label_names = tuple(label_names)
        with self._lock:
            handle = self._gauges.get(name)
            if handle is not None:
                if handle.label_names != label_names:
                    raise UpdateError(
                        f"gauge {name} already registered with labels {handle.label_names}, not {label_names}"
                    )
                return handle

            try:
                gauge = Gauge(name, documentation, labelnames=label_names, registry=self._registry)
            except ValueError as exc:
                raise UpdateError(f"can't register gauge {name}: {exc}") from exc

            handle = GaugeHandle(gauge, name, label_names, self._registry)
            self._gauges[name] = handle
            log.debug("Registered gauge %s%s", name, list(label_names))
            return handle

    def register_production_gauges(self) -> ProductionGauges:
        """The six per-item families, each labeled by item name."""
        if self._production is None:
            handles = [
                self.get_or_create_gauge(name, doc, (ITEM_LABEL,))
                for name, doc in PRODUCTION_GAUGES.items()
            ]
            self._production = ProductionGauges(*handles)
        return self._production

    def exposition(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self._registry)


_default: Optional[MetricRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> MetricRegistry:
    """Process-wide registry wrapping prometheus_client.REGISTRY."""
    global _default
    with _default_lock:
        if _default is None:
            _default = MetricRegistry(REGISTRY)
        return _default
