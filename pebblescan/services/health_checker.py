# pebblescan/services/health_checker.py

"""Sale-page connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass
from urllib.parse import urlparse

from curl_cffi import requests as curl_requests

from pebblescan.config.settings import Settings
from pebblescan.extractors.sale_list_parser import parse_sale_page

logger = logging.getLogger("pebblescan.health")

_HEALTH_TIMEOUT = 10  # seconds per page
_SLOW_THRESHOLD_MS = 5000


@dataclass
class HealthResult:
    """Result of a single page health check."""

    source_id: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def source_id_for(url: str) -> str:
    """Short label for a page: host plus the first two path segments."""
    parsed = urlparse(url)
    host = parsed.hostname or url
    tail = "/".join([s for s in parsed.path.split("/") if s][:2])
    return f"{host}/{tail}" if tail else host


def probe_page(url: str) -> HealthResult:
    """Fetch one sale page and check that entries can still be parsed.

    A 200 response with no recognisable entries is reported as down:
    it usually means the page layout changed.
    """
    source_id = source_id_for(url)
    start = time.monotonic()
    try:
        with curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        ) as session:
            resp = session.get(
                url,
                headers=Settings.DEFAULT_HEADERS,
                timeout=_HEALTH_TIMEOUT,
            )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            return HealthResult(
                source_id=source_id,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        entries = len(parse_sale_page(resp.text, url))
        if not entries:
            return HealthResult(
                source_id=source_id,
                status="down",
                latency_ms=elapsed_ms,
                message="No sale entries found",
            )

        if elapsed_ms > _SLOW_THRESHOLD_MS:
            return HealthResult(
                source_id=source_id,
                status="slow",
                latency_ms=elapsed_ms,
                message=f"High latency, {entries} entries",
            )

        return HealthResult(
            source_id=source_id,
            status="ok",
            latency_ms=elapsed_ms,
            message=f"{entries} entries",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            source_id=source_id,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


class HealthChecker:
    """Runs concurrent health probes against the configured sale pages."""

    def __init__(self, urls: list[str] | None = None) -> None:
        self.urls = Settings.SALE_PAGES if urls is None else urls

    async def check_all(self) -> list[HealthResult]:
        """Probe every page concurrently."""
        tasks = [asyncio.to_thread(probe_page, url) for url in self.urls]
        results: list[HealthResult] = list(await asyncio.gather(*tasks))
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.source_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
