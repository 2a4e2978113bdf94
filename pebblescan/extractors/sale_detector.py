# pebblescan/extractors/sale_detector.py

"""Discount detection and original-price derivation for a priced page."""

import logging
import re

from pebblescan.config.settings import Settings
from pebblescan.extractors.money import AMOUNT_RE, first_amount, parse_amount
from pebblescan.extractors.page_accessor import PageAccessor, class_string
from pebblescan.models.listing import SaleInfo

logger = logging.getLogger("pebblescan.extractors")

_STRUCK_TEXT_LIMIT = 50

_CURRENCY_PREFIX = r"(?:[$€£¥₩]|USD|EUR|GBP|JPY|KRW)?\s*"

# "was $99.99", "Originally: 99.99"
_WAS_BEFORE_RE = re.compile(
    r"\b(?:was|before|originally)\b\s*:?\s*" + _CURRENCY_PREFIX + AMOUNT_RE,
    re.IGNORECASE,
)
# "$99.99 was", "99.99 before"
_WAS_AFTER_RE = re.compile(
    AMOUNT_RE + r"\s*(?:USD|EUR|GBP|JPY|KRW)?\s*\(?\s*"
    r"(?:was|before|originally)\b",
    re.IGNORECASE,
)
_PERCENT_OFF_RE = re.compile(
    r"(?<![\d.])(\d+)\s*%\s*(?:off|discount|sale)", re.IGNORECASE
)
_SALE_CLASS_MARKERS: tuple[str, ...] = ("sale", "discount")


def struck_candidates(page: PageAccessor) -> list[float]:
    """Amounts found in strikethrough elements."""
    candidates: list[float] = []
    for text in page.struck_texts():
        if not text or len(text) >= _STRUCK_TEXT_LIMIT:
            continue
        amount = first_amount(text)
        if amount is not None:
            candidates.append(amount)
    return candidates


def was_phrase_candidate(
    page: PageAccessor, current_price: float,
) -> float | None:
    """The first "was/before/originally" amount, if above the current price."""
    text = page.body_text()
    for pattern in (_WAS_BEFORE_RE, _WAS_AFTER_RE):
        match = pattern.search(text)
        if not match:
            continue
        amount = parse_amount(match.group(1))
        if amount is not None and amount > current_price:
            return amount
        return None
    return None


def percent_off_original(
    page: PageAccessor, current_price: float,
) -> float | None:
    """Back-calculate the original price from an "N% off" phrase."""
    match = _PERCENT_OFF_RE.search(page.body_text())
    if not match:
        return None
    percent = int(match.group(1))
    if not 0 < percent < 100:
        return None
    original = round(current_price / (1 - percent / 100), 2)
    return original if original > current_price else None


def has_sale_class(page: PageAccessor) -> bool:
    """True if any element's class name mentions a sale or discount."""
    for el in page.elements():
        classes = class_string(el)
        if any(marker in classes for marker in _SALE_CLASS_MARKERS):
            return True
    return False


def _detect(page: PageAccessor, current_price: float) -> SaleInfo:
    explicit = struck_candidates(page)
    was_price = was_phrase_candidate(page, current_price)
    if was_price is not None:
        explicit.append(was_price)

    above = [c for c in explicit if c > current_price]
    if above:
        original = max(above)
        logger.debug(
            "Explicit original price %.2f (current %.2f) on %s",
            original,
            current_price,
            page.url,
        )
        return SaleInfo(original_price=original, is_on_sale=True)

    derived = percent_off_original(page, current_price)
    if derived is not None:
        logger.debug(
            "Original price %.2f derived from percentage on %s",
            derived,
            page.url,
        )
        return SaleInfo(original_price=derived, is_on_sale=True)

    if Settings.FLAG_CLASS_ONLY_SALES and has_sale_class(page):
        logger.debug("Sale flagged by class name only on %s", page.url)
        return SaleInfo(original_price=None, is_on_sale=True)

    return SaleInfo()


def detect_sale(page: PageAccessor, current_price: float | None) -> SaleInfo:
    """Decide whether the page shows a discount and derive the original price.

    Never raises: any internal fault degrades to "not on sale".
    """
    if current_price is None or current_price <= 0:
        return SaleInfo()
    try:
        info = _detect(page, current_price)
    except Exception:
        logger.warning(
            "Sale detection failed on %s, continuing without sale info",
            page.url,
            exc_info=True,
        )
        return SaleInfo()
    if info.original_price is not None and info.original_price <= current_price:
        return SaleInfo()
    return info
