# pebblescan/services/sale_aggregator.py

"""Collect sale stubs from a list of category pages."""

import asyncio
import logging

from pebblescan.config.settings import Settings
from pebblescan.extractors.sale_list_parser import parse_sale_page
from pebblescan.filters.deduplicator import SaleStubDeduplicator
from pebblescan.models.sale_stub import SaleStub
from pebblescan.services.page_fetcher import PageFetcher

logger = logging.getLogger("pebblescan.services")


class SaleAggregator:
    """Walks sale pages one at a time, politely, and merges what it finds."""

    def __init__(
        self,
        fetcher: PageFetcher,
        delay: float | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.delay = Settings.SALE_PAGE_DELAY if delay is None else delay

    async def scrape_page(self, url: str) -> list[SaleStub]:
        """Stubs from one page; an unreachable page yields none."""
        html = await self.fetcher.fetch(
            url, timeout=Settings.SALE_PAGE_TIMEOUT
        )
        if html is None:
            logger.error("Skipping sale page %s: fetch failed", url)
            return []
        stubs = parse_sale_page(html, url)
        logger.info("Found %d sale entries on %s", len(stubs), url)
        return stubs

    async def aggregate(
        self, page_urls: list[str] | None = None,
    ) -> list[SaleStub]:
        """Scrape every page in order and dedupe across pages by URL."""
        urls = Settings.SALE_PAGES if page_urls is None else page_urls
        collected: list[SaleStub] = []
        for index, url in enumerate(urls):
            if index and self.delay > 0:
                await asyncio.sleep(self.delay)
            try:
                collected.extend(await self.scrape_page(url))
            except Exception as exc:
                logger.error(
                    "Sale page %s failed: %s", url, exc, exc_info=True
                )
        unique, removed = SaleStubDeduplicator.deduplicate(collected)
        logger.info(
            "Aggregated %d unique sale entries from %d pages "
            "(%d duplicates dropped)",
            len(unique),
            len(urls),
            removed,
        )
        return unique
