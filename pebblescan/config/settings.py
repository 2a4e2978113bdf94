# pebblescan/config/settings.py

"""Central configuration for the pebblescan engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the pebblescan engine."""

    # --- Fetching ---
    REQUEST_TIMEOUT: int = int(
        os.getenv("PEBBLESCAN_REQUEST_TIMEOUT", "10")
    )                                   # Single listing page
    SALE_PAGE_TIMEOUT: int = 15         # Category listing pages
    MAX_RETRIES: int = 2                # Retry count on transient failures
    RETRY_DELAY: float = 1.0            # Base delay between retries
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff
    SALE_PAGE_DELAY: float = float(
        os.getenv("PEBBLESCAN_SALE_PAGE_DELAY", "1.0")
    )                                   # Seconds between sale pages
    PRICE_CHECK_DELAY: float = 1.0      # Seconds between tracked items
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Extraction ---
    PRICE_CEILING: float = 1_000_000.0  # Exclusive upper bound
    CURRENCY_SYMBOLS: list[str] = ["$", "€", "£", "¥", "₩"]
    DEFAULT_CURRENCY: str = "$"
    CURRENCY_CODES: dict[str, str] = {
        "USD": "$",
        "EUR": "€",
        "GBP": "£",
        "JPY": "¥",
        "KRW": "₩",
    }
    FLAG_CLASS_ONLY_SALES: bool = True  # Sale badge with no numbers
    CREATOR_MIN_LENGTH: int = 2
    CREATOR_MAX_LENGTH: int = 50

    # --- Matching ---
    FUZZY_MATCH_THRESHOLD: float = 0.70
    PRICE_CHANGE_TOLERANCE: float = 0.01

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome120"
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/webp,"
            "image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": "https://www.google.com/",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    RESULTS_DIR: Path = Path(
        os.getenv(
            "PEBBLESCAN_RESULTS_DIR", str(BASE_DIR / "results")
        )
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Platforms (hostname substring -> display name, first hit wins) ---
    PLATFORMS: list[tuple[str, str]] = [
        ("acon3d", "ACON3D"),
        ("gumroad", "Gumroad"),
        ("artstation", "ArtStation Marketplace"),
        ("blendermarket", "Blender Market"),
        ("cgtrader", "CGTrader"),
        ("turbosquid", "TurboSquid"),
        ("sketchfab", "Sketchfab"),
        ("clip-studio", "CSP Asset"),
        ("amazon", "Amazon"),
    ]

    # --- Sale pages scanned by the aggregator ---
    SALE_PAGES: list[str] = [
        "https://acon3d.com/en/toon?sort=NEWEST&onSale=true",
        "https://acon3d.com/en/game?sort=NEWEST&onSale=true",
        "https://acon3d.com/en/realistic?sort=NEWEST&onSale=true",
    ]
