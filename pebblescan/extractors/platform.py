# pebblescan/extractors/platform.py

"""Hostname-based platform identification and product-page detection."""

import re
from urllib.parse import urlparse

from pebblescan.config.settings import Settings

_ACON_PRODUCT_RE = re.compile(r"/(?:en|ko|ja)/product/\d+")
_AMAZON_PRODUCT_RE = re.compile(
    r"/(?:dp|gp/product)/[A-Z0-9]+", re.IGNORECASE
)


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def detect_platform(url: str) -> str:
    """Return the display name for *url*'s marketplace, or ``""``."""
    host = _hostname(url)
    if not host:
        return ""
    for needle, name in Settings.PLATFORMS:
        if needle in host:
            return name
    return ""


def is_product_page(url: str) -> bool:
    """Tell product pages apart from home/category/search pages.

    Only the marketplaces with a known product URL shape are
    restricted; any other host is accepted.
    """
    host = _hostname(url)
    if "acon3d" in host:
        return bool(_ACON_PRODUCT_RE.search(url))
    if "clip-studio" in host:
        return "/detail?id=" in url
    if "amazon" in host:
        return bool(_AMAZON_PRODUCT_RE.search(url))
    return True
