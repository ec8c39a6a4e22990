"""
HTTP client for the remote monitoring endpoint. One GET per call, no
retries -- the collector's poll interval is the retry cadence.
"""

from __future__ import annotations

import logging

import httpx

from prodexporter.errors import TransportError

log = logging.getLogger(__name__)

STATS_PATH = "/getProdStats"


class RemoteStatsClient:

    def __init__(self, base_url: str, timeout_seconds: float = 5.0):
        self._url = base_url.rstrip("/")
        if not self._url.endswith(STATS_PATH):
            self._url += STATS_PATH

        self._timeout = timeout_seconds
        self._client = httpx.Client(timeout=self._timeout)

    @property
    def url(self) -> str:
        return self._url

    def fetch(self) -> bytes:
        """GET the stats endpoint and return the raw body.

        Raises TransportError for anything that goes wrong on the wire:
        refused connections, timeouts, non-2xx responses, truncated reads.
        """
        try:
            response = self._client.get(self._url)
            response.raise_for_status()
            body = response.content
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{self._url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{self._url}: {exc!r}") from exc

        log.debug("Fetched %d bytes from %s", len(body), self._url)
        return body

    def close(self):
        self._client.close()

    def __enter__(self) -> "RemoteStatsClient":
        return self

    def __exit__(self, *exc_info):
        self.close()
