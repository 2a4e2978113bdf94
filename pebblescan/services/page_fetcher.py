# pebblescan/services/page_fetcher.py

"""Polite async page fetching with retries and a JS-challenge fallback."""

import asyncio
import logging
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi.requests import AsyncSession, Response

from pebblescan.config.settings import Settings

logger = logging.getLogger("pebblescan.fetch")


class PageFetcher:
    """Fetch HTML with a browser-impersonating session.

    Every failure mode (non-200, challenge page, timeout, network
    error) ends in ``None`` rather than an exception.  Use as an
    async context manager so the underlying session is closed.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self, session: AsyncSession | None = None) -> None:
        self.settings = Settings()
        self.session: AsyncSession = session or AsyncSession(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._current_delay: float = self.settings.RETRY_DELAY

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session.close()

    def _validate_response(self, url: str, text: str) -> bool:
        """Check for Cloudflare challenge pages and CAPTCHA indicators."""
        if text.lstrip().startswith(("{", "[")):
            return True
        lower = text.lower()

        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                logger.warning(
                    "Cloudflare challenge on %s (marker: '%s')",
                    url,
                    marker,
                )
                return False

        # Skip the keyword scan on pages with real content, product
        # pages mention "captcha" in footers and scripts
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    logger.warning(
                        "CAPTCHA keyword '%s' on %s", keyword, url
                    )
                    return False
        return True

    def _escalate_delay(self) -> None:
        """Double the current delay up to the configured max."""
        max_delay = (
            self.settings.RETRY_DELAY * self.settings.MAX_DELAY_MULTIPLIER
        )
        self._current_delay = min(self._current_delay * 2, max_delay)
        logger.warning(
            "Rate-limited, delay escalated to %.1fs", self._current_delay
        )

    def _reset_delay(self) -> None:
        self._current_delay = self.settings.RETRY_DELAY

    async def _fetch_get(
        self, url: str, headers: dict[str, str], timeout: int,
    ) -> Response | None:
        """GET with retries and adaptive delay."""
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = await self.session.get(
                    url, headers=headers, timeout=timeout
                )
                if resp.status_code == 200:
                    if not self._validate_response(url, resp.text):
                        self._escalate_delay()
                        await asyncio.sleep(self._current_delay)
                        continue
                    self._reset_delay()
                    return resp
                logger.warning(
                    "HTTP %d for %s on attempt %d",
                    resp.status_code,
                    url,
                    attempt + 1,
                )
                if resp.status_code in (429, 403):
                    self._escalate_delay()
                    await asyncio.sleep(self._current_delay)
            except Exception as exc:
                logger.warning(
                    "Request error for %s on attempt %d: %s",
                    url,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                await asyncio.sleep(self._current_delay * (attempt + 1))
        return None

    def _fallback_get(
        self, url: str, headers: dict[str, str], timeout: int,
    ) -> str | None:
        """Blocking cloudscraper GET, run off the event loop."""
        _cs: Any = cloudscraper
        scraper: Any = _cs.create_scraper()
        resp: Any = scraper.get(url, headers=headers, timeout=timeout)
        if resp.status_code != 200:
            logger.warning(
                "cloudscraper got HTTP %d for %s", resp.status_code, url
            )
            return None
        text = str(resp.text)
        if not self._validate_response(url, text):
            return None
        return text

    async def fetch(self, url: str, timeout: int | None = None) -> str | None:
        """Return the page body for *url*, or ``None`` if it can't be had."""
        timeout = timeout or self.settings.REQUEST_TIMEOUT
        headers: dict[str, str] = dict(self.settings.DEFAULT_HEADERS)

        # Primary: curl_cffi (browser-impersonating TLS)
        resp = await self._fetch_get(url, headers, timeout)
        if resp is not None:
            logger.debug("Fetched %s (%d bytes)", url, len(resp.text))
            return resp.text

        # Fallback: cloudscraper (JS challenge solver)
        logger.info(
            "curl_cffi exhausted for %s, falling back to cloudscraper", url
        )
        try:
            return await asyncio.to_thread(
                self._fallback_get, url, headers, timeout
            )
        except Exception as exc:
            logger.error(
                "cloudscraper fallback also failed for %s: %s",
                url,
                exc,
                exc_info=True,
            )
        return None
