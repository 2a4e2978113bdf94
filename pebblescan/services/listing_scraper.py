# pebblescan/services/listing_scraper.py

"""Fetch a single product page and extract its listing."""

import logging

from pebblescan.config.settings import Settings
from pebblescan.extractors.field_extractor import fallback_title
from pebblescan.extractors.listing_extractor import (
    extract_listing,
    extract_listing_from_dom,
)
from pebblescan.extractors.platform import detect_platform, is_product_page
from pebblescan.models.listing import ExtractedListing
from pebblescan.services.page_fetcher import PageFetcher

logger = logging.getLogger("pebblescan.services")


class ListingScraper:
    """Scrape product URLs into listings; never raises for bad pages."""

    def __init__(self, fetcher: PageFetcher) -> None:
        self.fetcher = fetcher

    @staticmethod
    def minimal_listing(url: str) -> ExtractedListing:
        """What the caller gets when the page itself is unavailable."""
        return ExtractedListing(
            url=url,
            title=fallback_title(url),
            platform=detect_platform(url),
        )

    async def scrape(self, url: str, dom: bool = False) -> ExtractedListing:
        """Fetch *url* and extract it.

        With ``dom=True`` the page is parsed into an element tree and
        the DOM-only strategies run as well.
        """
        if not is_product_page(url):
            logger.warning("%s does not look like a product page", url)

        html = await self.fetcher.fetch(url, timeout=Settings.REQUEST_TIMEOUT)
        if html is None:
            logger.error("Could not fetch %s, returning minimal listing", url)
            return self.minimal_listing(url)

        if dom:
            return extract_listing_from_dom(html, url)
        return extract_listing(html, url)
