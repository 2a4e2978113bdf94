# pebblescan/extractors/creator_resolver.py

"""Seller/brand resolution, independent of price extraction."""

import logging
import re
from collections.abc import Callable

from pebblescan.config.settings import Settings
from pebblescan.extractors.cascade import Strategy, first_success
from pebblescan.extractors.page_accessor import PageAccessor

logger = logging.getLogger("pebblescan.extractors")

# ACON3D brand labels, English and Korean
_BRAND_LABEL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?:Brand|brand):[ \t]*([A-Za-z0-9 \t]+)"),
    re.compile(r"(?:Brand|brand)[ \t]*([A-Za-z0-9 \t]+)"),
    re.compile(r"브랜드:[ \t]*([A-Za-z0-9 \t가-힣]+)"),
]

_AUTHOR_LABEL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b(?:by|By|BY)[ \t]+([A-Z][a-zA-Z0-9 \t]{2,50})"),
    re.compile(r"\b(?:Created by|created by)[ \t]+([A-Z][a-zA-Z0-9 \t]{2,50})"),
    re.compile(r"(?:Author|author):[ \t]*([A-Z][a-zA-Z0-9 \t]{2,50})"),
    re.compile(r"(?:Artist|artist):[ \t]*([A-Z][a-zA-Z0-9 \t]{2,50})"),
    re.compile(r"(?:Creator|creator):[ \t]*([A-Z][a-zA-Z0-9 \t]{2,50})"),
    re.compile(r"(?:Seller|seller):[ \t]*([A-Z][a-zA-Z0-9 \t]{2,50})"),
]

_BRAND_SELECTORS: list[str] = [
    'a[href*="/brand/"]',
    '[class*="brand"]',
    "[data-brand]",
]

_CREATOR_SELECTORS: list[str] = [
    '[class*="creator"]',
    '[class*="author"]',
    '[class*="artist"]',
    '[class*="seller"]',
    "[data-author]",
    "[data-creator]",
    'a[href*="/creator/"]',
    'a[href*="/artist/"]',
    'a[href*="/user/"]',
    'a[href*="/seller/"]',
]

# Things that land in creator-ish slots but are not names
_NOISE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^\d+\s*days?$", re.IGNORECASE),
    re.compile(r"^\d+\s*hours?$", re.IGNORECASE),
    re.compile(r"^\d+\s*min(?:ute)?s?$", re.IGNORECASE),
    re.compile(r"^\d+[hm]$", re.IGNORECASE),
    re.compile(r"^(?:sale|discount|off)$", re.IGNORECASE),
    re.compile(r"^\d+%$"),
    re.compile(r"_"),
    re.compile(r"^[a-z]+[A-Z]"),
    re.compile(
        r"^(?:author|creator|brand|artist|seller|name|top|bottom|left|"
        r"right|inner|outer|wrapper|container|box|div|span|content|id|"
        r"content\s+id)$",
        re.IGNORECASE,
    ),
]

_AMAZON_BYLINE_PREFIX_RE = re.compile(r"^(?:Visit the |Brand:\s*)", re.IGNORECASE)
_AMAZON_BYLINE_SUFFIX_RE = re.compile(r"\s*Store$", re.IGNORECASE)


def accept_creator(raw: str | None) -> str | None:
    """Normalise a candidate name, or return ``None`` if it is unusable.

    Rejects embedded newlines, lengths outside the configured bounds
    and noise tokens such as sale timers or CSS identifiers.
    """
    if not raw:
        return None
    stripped = raw.strip()
    if "\n" in stripped:
        return None
    name = " ".join(stripped.split())
    if not (
        Settings.CREATOR_MIN_LENGTH
        <= len(name)
        <= Settings.CREATOR_MAX_LENGTH
    ):
        return None
    if any(p.search(name) for p in _NOISE_PATTERNS):
        return None
    return name


def _from_text_patterns(
    page: PageAccessor, patterns: list[re.Pattern[str]],
) -> str | None:
    text = page.body_text()
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        name = accept_creator(match.group(1))
        if name:
            return name
    return None


def _from_selectors(
    page: PageAccessor,
    selectors: list[str],
    data_attrs: tuple[str, ...],
) -> str | None:
    for selector in selectors:
        el = page.select_one(selector)
        if el is None:
            continue
        raw: str | None = None
        for attr in data_attrs:
            value = el.get(attr)
            if isinstance(value, str) and value.strip():
                raw = value
                break
        if raw is None:
            # Element text is flattened before acceptance
            raw = " ".join(el.get_text(" ").split())
        name = accept_creator(raw)
        if name:
            return name
    return None


def creator_from_acon_brand(page: PageAccessor) -> str | None:
    return _from_text_patterns(page, _BRAND_LABEL_PATTERNS) or _from_selectors(
        page, _BRAND_SELECTORS, ("data-brand",)
    )


def creator_from_amazon_byline(page: PageAccessor) -> str | None:
    author = page.select_one(".author.notFaded a, .author.notFaded")
    if author is not None:
        name = accept_creator(" ".join(author.get_text(" ").split()))
        if name:
            return name
    byline = page.select_one("#bylineInfo")
    if byline is None:
        return None
    text = " ".join(byline.get_text(" ").split())
    text = _AMAZON_BYLINE_PREFIX_RE.sub("", text)
    return accept_creator(_AMAZON_BYLINE_SUFFIX_RE.sub("", text))


def creator_from_csp_author(page: PageAccessor) -> str | None:
    el = page.select_one(".authorTop__name")
    if el is None:
        return None
    return accept_creator(el.get_text(" ", strip=True))


_PLATFORM_STRATEGIES: dict[str, Strategy[str]] = {
    "ACON3D": creator_from_acon_brand,
    "Amazon": creator_from_amazon_byline,
    "CSP Asset": creator_from_csp_author,
}


def creator_from_meta(page: PageAccessor) -> str | None:
    for key in ("author", "article:author"):
        name = accept_creator(page.meta_content(key))
        if name:
            return name
    return None


def creator_from_labels(page: PageAccessor) -> str | None:
    return _from_text_patterns(page, _AUTHOR_LABEL_PATTERNS)


def creator_from_dom(page: PageAccessor) -> str | None:
    return _from_selectors(
        page, _CREATOR_SELECTORS, ("data-author", "data-creator")
    )


def _strategies_for(platform_hint: str) -> list[Strategy[str]]:
    strategies: list[Strategy[str]] = []
    platform_specific: Callable[[PageAccessor], str | None] | None = (
        _PLATFORM_STRATEGIES.get(platform_hint)
    )
    if platform_specific is not None:
        strategies.append(platform_specific)
    strategies.extend([creator_from_meta, creator_from_labels, creator_from_dom])
    return strategies


def resolve_creator(page: PageAccessor, platform_hint: str = "") -> str:
    """Find the seller/brand name for *page*; ``""`` when nothing fits."""
    try:
        name = first_success(
            _strategies_for(platform_hint), page, "creator"
        )
    except Exception:
        logger.warning(
            "Creator extraction failed on %s", page.url, exc_info=True
        )
        return ""
    return name or ""
