# pebblescan/extractors/sale_list_parser.py

"""Parse an ACON3D on-sale category page into :class:`SaleStub` entries.

Three independent parsers run over the same markup and their results
are concatenated before the per-page URL dedup; a product found by more
than one parser keeps the entry produced last.
"""

import html as html_lib
import json
import logging
import re
from collections.abc import Callable
from typing import Any, cast
from urllib.parse import urljoin

from pebblescan.filters.deduplicator import SaleStubDeduplicator
from pebblescan.models.sale_stub import SaleStub

logger = logging.getLogger("pebblescan.extractors")

_PRODUCT_PATH = r"/(?:en|ko|ja)/product/\d+"

# <a href="/en/product/123">Title text
_ANCHOR_RE = re.compile(
    r"href=\"(" + _PRODUCT_PATH + r")\"[^>]*>([^<]*)", re.IGNORECASE
)
# Product anchor followed by a title/name/product-classed child
_CARD_RE = re.compile(
    r"<a[^>]*href=\"(" + _PRODUCT_PATH + r")\"[^>]*>[\s\S]*?"
    r"<(?:h[1-6]|span|div)[^>]*class=\"[^\"]*(?:title|name|product)"
    r"[^\"]*\"[^>]*>([^<]+)",
    re.IGNORECASE,
)
_DATA_ATTR_RE = re.compile(
    r"data-product-url=\"([^\"]+)\"[\s\S]*?data-product-name=\"([^\"]+)\"",
    re.IGNORECASE,
)
_JSON_LD_RE = re.compile(
    r"<script type=\"application/ld\+json\">([\s\S]*?)</script>",
    re.IGNORECASE,
)


def _title(raw: str) -> str:
    return " ".join(html_lib.unescape(raw).split())


def _image_url(image: object) -> str:
    """Thumbnail URL from a JSON-LD image: a string, list or ImageObject."""
    if isinstance(image, list):
        images = cast(list[object], image)
        image = images[0] if images else None
    if isinstance(image, dict):
        image_obj = cast(dict[str, Any], image)
        image = image_obj.get("url") or image_obj.get("contentUrl")
    return image if isinstance(image, str) else ""


def parse_anchor_links(html: str, base_url: str) -> list[SaleStub]:
    """Product anchors whose own text is the title."""
    stubs: list[SaleStub] = []
    for match in _ANCHOR_RE.finditer(html):
        title = _title(match.group(2))
        if title:
            stubs.append(
                SaleStub(title=title, url=urljoin(base_url, match.group(1)))
            )
    return stubs


def parse_product_cards(html: str, base_url: str) -> list[SaleStub]:
    """Card markup with a nested title element, and data-product pairs."""
    stubs: list[SaleStub] = []
    for pattern in (_CARD_RE, _DATA_ATTR_RE):
        for match in pattern.finditer(html):
            title = _title(match.group(2))
            if not title:
                continue
            url = html_lib.unescape(match.group(1))
            if not url.startswith("http"):
                url = urljoin(base_url, url)
            stubs.append(SaleStub(title=title, url=url))
    return stubs


def _item_list_entries(data: object) -> list[dict[str, Any]]:
    if not isinstance(data, dict):
        return []
    node = cast(dict[str, Any], data)
    if node.get("@type") != "ItemList":
        return []
    elements: object = node.get("itemListElement")
    if not isinstance(elements, list):
        return []
    entries: list[dict[str, Any]] = []
    for element in cast(list[object], elements):
        if not isinstance(element, dict):
            continue
        entry = cast(dict[str, Any], element)
        # schema.org ListItem wraps the product in "item"
        nested: object = entry.get("item")
        if "url" not in entry and isinstance(nested, dict):
            entry = cast(dict[str, Any], nested)
        entries.append(entry)
    return entries


def parse_item_list(html: str, base_url: str) -> list[SaleStub]:
    """JSON-LD ``ItemList`` entries; malformed blocks are skipped."""
    stubs: list[SaleStub] = []
    for match in _JSON_LD_RE.finditer(html):
        try:
            data: object = json.loads(match.group(1))
        except json.JSONDecodeError:
            logger.debug("Skipping malformed JSON-LD block on %s", base_url)
            continue
        for entry in _item_list_entries(data):
            url = entry.get("url")
            name = entry.get("name")
            if not url or not name:
                continue
            stubs.append(
                SaleStub(
                    title=" ".join(str(name).split()),
                    url=urljoin(base_url, str(url)),
                    thumbnail_url=_image_url(entry.get("image")),
                )
            )
    return stubs


SALE_LIST_PARSERS: list[Callable[[str, str], list[SaleStub]]] = [
    parse_anchor_links,
    parse_product_cards,
    parse_item_list,
]


def parse_sale_page(html: str, base_url: str) -> list[SaleStub]:
    """Run every parser over *html* and dedupe the result by URL."""
    found: list[SaleStub] = []
    for parser in SALE_LIST_PARSERS:
        found.extend(parser(html, base_url))
    stubs, _ = SaleStubDeduplicator.deduplicate(found)
    logger.debug(
        "Parsed %d sale stubs (%d raw) from %s",
        len(stubs),
        len(found),
        base_url,
    )
    return stubs
