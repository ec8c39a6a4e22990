"""
Base collector interface.

A collector is anything that can poll a source on its own schedule and
push what it finds into the metric registry. Keeps the CLI decoupled from
where the numbers come from.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from prodexporter.collector.production_collector import CollectionTask


class MetricCollector(ABC):
    """Interface for all polling metrics sources."""

    @abstractmethod
    def begin_collecting(self, cancel: Optional[threading.Event] = None) -> "CollectionTask":
        """Start polling in the background until `cancel` is set."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...

    def close(self):
        """Release network resources. Default: nothing to release."""
