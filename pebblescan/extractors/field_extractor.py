# pebblescan/extractors/field_extractor.py

"""Title, image, price and currency extraction from an arbitrary product page.

Each field is resolved on its own by an ordered list of strategies; the
first one that yields a usable value wins.  Nothing here raises for
missing data: an unresolved field just stays empty.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, cast
from urllib.parse import unquote, urljoin, urlparse

from pebblescan.extractors.cascade import Strategy, first_success
from pebblescan.extractors.money import (
    AMOUNT_RE,
    first_amount,
    infer_currency,
    parse_amount,
    symbol_for_code,
    symbol_in_text,
)
from pebblescan.extractors.page_accessor import (
    PageAccessor,
    class_string,
    is_struck,
)
from pebblescan.extractors.platform import detect_platform
from pebblescan.models.listing import ExtractedListing

logger = logging.getLogger("pebblescan.extractors")

MIN_TITLE_LENGTH = 3
FALLBACK_TITLE = "Unknown Asset"


@dataclass
class PriceHit:
    """A price accepted by one strategy; ``currency=None`` means "infer"."""

    amount: float
    currency: str | None = None


# ----------------------------------------------------------------------
# Shared helpers
# ----------------------------------------------------------------------


def _clean_title(raw: str | None) -> str | None:
    """Collapse whitespace; titles shorter than 3 chars count as a miss."""
    if not raw:
        return None
    title = " ".join(raw.split())
    return title if len(title) >= MIN_TITLE_LENGTH else None


def _absolute(page: PageAccessor, src: str | None) -> str | None:
    if not src or not src.strip():
        return None
    return urljoin(page.url, src.strip())


def fallback_title(url: str) -> str:
    """Last URL path segment, used when no page title could be found."""
    try:
        path = urlparse(url).path
    except ValueError:
        path = ""
    segment = unquote(path.rstrip("/").split("/")[-1]) if path else ""
    return segment or FALLBACK_TITLE


def json_ld_nodes(page: PageAccessor) -> list[dict[str, Any]]:
    """Every JSON object in the page's JSON-LD, flattening lists/@graph.

    Malformed blocks are skipped one at a time.
    """
    nodes: list[dict[str, Any]] = []
    for block in page.json_ld_blocks():
        try:
            data: object = json.loads(block)
        except (json.JSONDecodeError, TypeError):
            logger.debug("Skipping malformed JSON-LD block on %s", page.url)
            continue
        pending: list[object] = [data]
        while pending:
            item = pending.pop(0)
            if isinstance(item, list):
                pending.extend(cast(list[object], item))
            elif isinstance(item, dict):
                node = cast(dict[str, Any], item)
                nodes.append(node)
                graph: object = node.get("@graph")
                if isinstance(graph, list):
                    pending.extend(cast(list[object], graph))
    return nodes


# ----------------------------------------------------------------------
# Title
# ----------------------------------------------------------------------

_PLATFORM_TITLE_SELECTORS: dict[str, list[str]] = {
    "Amazon": ["#productTitle"],
    "CSP Asset": [".materialHeaderTitle span[data-translated-text]"],
}


def title_from_platform(page: PageAccessor) -> str | None:
    for selector in _PLATFORM_TITLE_SELECTORS.get(
        detect_platform(page.url), []
    ):
        el = page.select_one(selector)
        if el is not None:
            title = _clean_title(el.get_text(" ", strip=True))
            if title:
                return title
    return None


def title_from_og(page: PageAccessor) -> str | None:
    return _clean_title(page.meta_content("og:title"))


def title_from_twitter(page: PageAccessor) -> str | None:
    return _clean_title(page.meta_content("twitter:title"))


def title_from_title_tag(page: PageAccessor) -> str | None:
    raw = page.title_tag()
    if not raw:
        return None
    return _clean_title(re.split(r"[|-]", raw, maxsplit=1)[0])


def title_from_heading(page: PageAccessor) -> str | None:
    return _clean_title(page.first_heading())


TITLE_STRATEGIES: list[Strategy[str]] = [
    title_from_platform,
    title_from_og,
    title_from_twitter,
    title_from_title_tag,
    title_from_heading,
]


# ----------------------------------------------------------------------
# Image
# ----------------------------------------------------------------------

_PRODUCT_IMAGE_SELECTORS: list[str] = [
    "main img",
    '[class*="product"] img',
    '[class*="Product"] img',
    "article img",
    ".content img",
]

_AMAZON_IMAGE_SELECTORS: list[str] = [
    "#imgTagWrapperId img",
    "#landingImage",
    "#imgBlkFront",
]


def _first_img_src(page: PageAccessor, selectors: list[str]) -> str | None:
    for selector in selectors:
        el = page.select_one(selector)
        if el is None:
            continue
        src = el.get("src")
        if isinstance(src, str) and src.strip():
            return _absolute(page, src)
    return None


def image_from_platform(page: PageAccessor) -> str | None:
    if detect_platform(page.url) != "Amazon":
        return None
    return _first_img_src(page, _AMAZON_IMAGE_SELECTORS)


def image_from_og(page: PageAccessor) -> str | None:
    return _absolute(page, page.meta_content("og:image"))


def image_from_twitter(page: PageAccessor) -> str | None:
    return _absolute(page, page.meta_content("twitter:image"))


def image_from_og_url(page: PageAccessor) -> str | None:
    return _absolute(page, page.meta_content("og:image:url"))


def image_from_product_container(page: PageAccessor) -> str | None:
    for selector in _PRODUCT_IMAGE_SELECTORS:
        el = page.select_one(selector)
        if el is None:
            continue
        src = el.get("src")
        if not isinstance(src, str) or not src.strip():
            continue
        lowered = src.lower()
        if "icon" in lowered or "logo" in lowered:
            continue
        return _absolute(page, src)
    return None


IMAGE_STRATEGIES: list[Strategy[str]] = [
    image_from_platform,
    image_from_og,
    image_from_twitter,
    image_from_og_url,
    image_from_product_container,
]


# ----------------------------------------------------------------------
# Price
# ----------------------------------------------------------------------

# Body-text patterns, tried in this order; first in-range amount wins
TEXT_PRICE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\$\s*" + AMOUNT_RE), "$"),
    (re.compile(r"USD\s*" + AMOUNT_RE), "$"),
    (re.compile(AMOUNT_RE + r"\s*USD"), "$"),
    (re.compile(r"€\s*" + AMOUNT_RE), "€"),
    (re.compile(r"EUR\s*" + AMOUNT_RE), "€"),
    (re.compile(AMOUNT_RE + r"\s*EUR"), "€"),
    (re.compile(r"£\s*" + AMOUNT_RE), "£"),
    (re.compile(r"GBP\s*" + AMOUNT_RE), "£"),
    (re.compile(r"¥\s*(\d[\d,]*)"), "¥"),
    (re.compile(r"₩\s*(\d[\d,]*)"), "₩"),
    (re.compile(r"KRW\s*(\d[\d,]*)"), "₩"),
    (re.compile(r"(\d[\d,]*)\s*KRW"), "₩"),
]

# Raw-markup fragments that carry no currency of their own
MARKUP_PRICE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\"price\"\s*:\s*\"?" + AMOUNT_RE, re.IGNORECASE),
    re.compile(r"data-price\s*=\s*[\"']?" + AMOUNT_RE, re.IGNORECASE),
]

_SHORT_PRICE_RE = re.compile(
    r"^[$₩€£]?\s*" + AMOUNT_RE + r"\s*[$₩€£]?$"
)
_SHORT_TEXT_LIMIT = 100


def price_from_platform(page: PageAccessor) -> PriceHit | None:
    if detect_platform(page.url) != "Amazon":
        return None
    for selector in (
        ".a-price .a-offscreen",
        "#priceblock_ourprice, #priceblock_dealprice, .a-price-whole",
    ):
        el = page.select_one(selector)
        if el is None:
            continue
        text = el.get_text(strip=True)
        amount = first_amount(text)
        if amount is not None:
            return PriceHit(amount, symbol_in_text(text))
    return None


def price_from_meta(page: PageAccessor) -> PriceHit | None:
    amount = parse_amount(
        page.meta_content("product:price:amount")
        or page.meta_content("og:price:amount")
    )
    if amount is None:
        return None
    code = page.meta_content("product:price:currency") or page.meta_content(
        "og:price:currency"
    )
    return PriceHit(amount, symbol_for_code(code))


def price_from_json_ld(page: PageAccessor) -> PriceHit | None:
    for node in json_ld_nodes(page):
        offers: object = node.get("offers")
        if isinstance(offers, list):
            offer_list = [
                o for o in cast(list[object], offers) if isinstance(o, dict)
            ]
            offers = offer_list[0] if offer_list else None
        if not isinstance(offers, dict):
            continue
        offer = cast(dict[str, Any], offers)
        raw = offer.get("price", offer.get("lowPrice"))
        amount = parse_amount(str(raw) if raw is not None else None)
        if amount is None:
            continue
        return PriceHit(
            amount, symbol_for_code(str(offer.get("priceCurrency") or ""))
        )
    return None


def price_from_body_text(page: PageAccessor) -> PriceHit | None:
    # Struck-through amounts are the old price, not the current one
    text = page.price_text()
    for pattern, symbol in TEXT_PRICE_PATTERNS:
        for match in pattern.finditer(text):
            amount = parse_amount(match.group(1))
            if amount is not None:
                return PriceHit(amount, symbol)
    return None


def price_from_markup(page: PageAccessor) -> PriceHit | None:
    markup = page.markup
    for pattern in MARKUP_PRICE_PATTERNS:
        for match in pattern.finditer(markup):
            amount = parse_amount(match.group(1))
            if amount is not None:
                return PriceHit(amount)
    return None


def price_from_short_text(page: PageAccessor) -> PriceHit | None:
    for el in page.elements():
        if is_struck(el):
            continue
        parent = el.parent
        price_related = (
            "price" in class_string(el)
            or el.has_attr("data-price")
            or (parent is not None and "price" in class_string(parent))
        )
        if not price_related:
            continue
        text = el.get_text().strip()
        if not text or len(text) > _SHORT_TEXT_LIMIT:
            continue
        match = _SHORT_PRICE_RE.match(text)
        if not match:
            continue
        amount = parse_amount(match.group(1))
        if amount is not None:
            return PriceHit(amount, symbol_in_text(text))
    return None


PRICE_STRATEGIES: list[Strategy[PriceHit]] = [
    price_from_platform,
    price_from_meta,
    price_from_json_ld,
    price_from_body_text,
    price_from_markup,
    price_from_short_text,
]


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------


def extract_fields(page: PageAccessor) -> ExtractedListing:
    """Resolve title, image, price, currency and platform for *page*."""
    listing = ExtractedListing(url=page.url)
    listing.platform = detect_platform(page.url)

    title = first_success(TITLE_STRATEGIES, page, "title")
    listing.title = title or fallback_title(page.url)

    listing.thumbnail_url = (
        first_success(IMAGE_STRATEGIES, page, "image") or ""
    )

    hit = first_success(PRICE_STRATEGIES, page, "price")
    if hit is not None:
        listing.price = hit.amount
        listing.currency = hit.currency or infer_currency(page.markup)
    return listing
