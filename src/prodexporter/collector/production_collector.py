"""
Collector for the factory's production stats. Polls /getProdStats on a
fixed interval and maps every item into six labeled gauges.

A bad poll (endpoint down, garbage payload, a value the registry rejects)
is logged and dropped; the next poll happens one interval later as usual.
The only way out of the loop is the cancellation event.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, List, Optional

from prodexporter.collector.base import MetricCollector
from prodexporter.collector.payload_decoder import decode_production_details
from prodexporter.collector.stats_client import RemoteStatsClient
from prodexporter.errors import ExporterError
from prodexporter.metrics import ProductionDetail
from prodexporter.registry import MetricRegistry, default_registry

log = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0


class CollectorState(enum.Enum):
    IDLE = "idle"
    WAITING = "waiting"
    FETCHING = "fetching"
    UPDATING = "updating"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CollectionTask:
    """Handle on a running poll loop. Owns its cancellation event and can be
    joined; the worker always finishes normally, even when cancelled."""

    def __init__(self, target: Callable[["CollectionTask"], None], cancel: threading.Event, name: str):
        self._cancel = cancel
        self._thread = threading.Thread(target=target, args=(self,), name=name, daemon=True)
        self.ticks = 0
        self.failures = 0

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def start(self):
        self._thread.start()

    def cancel(self):
        self._cancel.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the loop to exit. Returns True once it has."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def done(self) -> bool:
        return self._thread.ident is not None and not self._thread.is_alive()


class ProductionMetricsCollector(MetricCollector):

    def __init__(
        self,
        base_url: str,
        registry: Optional[MetricRegistry] = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        timeout_seconds: float = 5.0,
        client: Optional[RemoteStatsClient] = None,
    ):
        self._client = client if client is not None else RemoteStatsClient(base_url, timeout_seconds)
        self._registry = registry if registry is not None else default_registry()
        self._gauges = self._registry.register_production_gauges()
        self._interval = interval_seconds
        self._state = CollectorState.IDLE
        self._task: Optional[CollectionTask] = None

    @property
    def state(self) -> CollectorState:
        return self._state

    @property
    def registry(self) -> MetricRegistry:
        return self._registry

    def begin_collecting(self, cancel: Optional[threading.Event] = None) -> CollectionTask:
        if self._task is not None and not self._task.done():
            raise RuntimeError(f"{self.name()} is already collecting")

        cancel = cancel if cancel is not None else threading.Event()
        log.info("Will collect production metrics from %s every %.1fs", self._client.url, self._interval)

        task = CollectionTask(self._run, cancel, name="production-collector")
        self._task = task
        task.start()
        return task

    def _run(self, task: CollectionTask):
        cancel = task.cancel_event
        try:
            while not cancel.is_set():
                self._state = CollectorState.WAITING
                if cancel.wait(self._interval):
                    break
                self._tick(task)
        finally:
            self._state = CollectorState.CANCELLED
            log.info("Stopped collecting from %s after %d polls (%d failed)",
                     self._client.url, task.ticks, task.failures)

    def _tick(self, task: CollectionTask):
        task.ticks += 1
        try:
            count = self.poll_once()
        except ExporterError as e:
            task.failures += 1
            self._state = CollectorState.FAILED
            log.warning("Production poll %d failed: %s", task.ticks, e)
        except Exception:
            task.failures += 1
            self._state = CollectorState.FAILED
            log.exception("Unexpected error in production poll %d", task.ticks)
        else:
            log.debug("Production poll %d updated %d items", task.ticks, count)

    def fetch_details(self) -> List[ProductionDetail]:
        """One fetch + decode, no registry writes."""
        self._state = CollectorState.FETCHING
        raw = self._client.fetch()
        return decode_production_details(raw)

    def poll_once(self) -> int:
        """Run a single fetch/decode/update cycle. Errors propagate to the caller."""
        details = self.fetch_details()
        self._state = CollectorState.UPDATING
        for detail in details:
            self.update(detail)
        return len(details)

    def update(self, detail: ProductionDetail):
        """Write one record's values into its six gauges.

        Not transactional: if a write fails, earlier gauges for this item
        keep their new values and the rest are skipped.
        """
        labels = (detail.item_name,)
        g = self._gauges
        for gauge, value in (
            (g.production_capacity, detail.production_capacity),
            (g.production_percent, detail.production_percent),
            (g.consumption_capacity, detail.consumption_capacity),
            (g.consumption_percent, detail.consumption_percent),
            (g.items_produced, detail.current_production),
            (g.items_consumed, detail.current_consumption),
        ):
            if value is None:
                continue
            gauge.set_value(labels, value)

    def name(self) -> str:
        return f"Production stats ({self._client.url})"

    def close(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
            self._task.join()
        self._client.close()
