"""prodexporter - republish factory production stats as Prometheus gauges."""

__version__ = "0.1.0"
