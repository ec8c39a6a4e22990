"""
Failure taxonomy for one poll tick. The collector catches all of these
at the tick boundary, logs them, and keeps polling.
"""


class ExporterError(Exception):
    """Base class for everything a tick can fail with."""


class TransportError(ExporterError):
    """Couldn't reach the stats endpoint or read its response."""


class DecodeError(ExporterError):
    """Payload wasn't a well-formed production stats array."""


class UpdateError(ExporterError):
    """A decoded value couldn't be applied to the metric registry."""
