# pebblescan/extractors/listing_extractor.py

"""Entry points that turn one product page into an :class:`ExtractedListing`."""

import logging

from bs4 import BeautifulSoup

from pebblescan.extractors.creator_resolver import resolve_creator
from pebblescan.extractors.field_extractor import extract_fields
from pebblescan.extractors.page_accessor import (
    DomAccessor,
    PageAccessor,
    StringAccessor,
)
from pebblescan.extractors.sale_detector import detect_sale
from pebblescan.models.listing import ExtractedListing

logger = logging.getLogger("pebblescan.extractors")


def extract_from_page(page: PageAccessor) -> ExtractedListing:
    """Fields first, then sale detection against the found price, then creator."""
    listing = extract_fields(page)
    listing.apply_sale(detect_sale(page, listing.price))
    listing.creator = resolve_creator(page, listing.platform)
    logger.info(
        "Extracted '%s' from %s (price=%s%s, sale=%s, creator=%s)",
        listing.title,
        page.url,
        listing.currency,
        listing.price,
        listing.is_on_sale,
        listing.creator or "-",
    )
    return listing


def extract_listing(html: str, url: str) -> ExtractedListing:
    """Server-side extraction from a fetched HTML string."""
    return extract_from_page(StringAccessor(html, url))


def extract_listing_from_dom(
    dom: BeautifulSoup | str, url: str,
) -> ExtractedListing:
    """Browser-context extraction with full element queries."""
    return extract_from_page(DomAccessor(dom, url))
