# pebblescan/extractors/money.py

"""Amount parsing and currency-symbol normalisation."""

import re

from pebblescan.config.settings import Settings

# A number with optional thousands separators and decimals: 1,299.00
AMOUNT_RE = r"(\d[\d,]*(?:\.\d+)?)"

_FIRST_AMOUNT_RE = re.compile(AMOUNT_RE)

# Page-level currency hints, checked in this order
_CURRENCY_HINTS: list[tuple[tuple[str, ...], str]] = [
    (("€", "EUR"), "€"),
    (("£", "GBP"), "£"),
    (("¥", "JPY"), "¥"),
    (("₩", "KRW"), "₩"),
]


def in_price_range(value: float) -> bool:
    """Return True if *value* is a plausible price (0 < v < ceiling)."""
    return 0 < value < Settings.PRICE_CEILING


def parse_amount(raw: str | None) -> float | None:
    """Parse ``'1,299.00'`` into ``1299.0``; reject out-of-range values."""
    if not raw:
        return None
    try:
        value = float(raw.replace(",", "").strip())
    except ValueError:
        return None
    if not in_price_range(value):
        return None
    return value


def first_amount(text: str | None) -> float | None:
    """Extract the first plausible amount from a short text fragment."""
    if not text:
        return None
    match = _FIRST_AMOUNT_RE.search(text)
    if not match:
        return None
    return parse_amount(match.group(1))


def symbol_for_code(code: str | None) -> str | None:
    """Map an ISO code (or a bare symbol) onto the supported symbol set."""
    if not code:
        return None
    cleaned = code.strip()
    if cleaned in Settings.CURRENCY_SYMBOLS:
        return cleaned
    return Settings.CURRENCY_CODES.get(cleaned.upper())


def symbol_in_text(text: str) -> str | None:
    """Return the first supported currency symbol appearing in *text*."""
    for symbol in ("$", "₩", "€", "£", "¥"):
        if symbol in text:
            return symbol
    return None


def infer_currency(markup: str) -> str:
    """Guess the page currency from literal symbols/codes; default ``$``."""
    for needles, symbol in _CURRENCY_HINTS:
        if any(needle in markup for needle in needles):
            return symbol
    return Settings.DEFAULT_CURRENCY
