# pebblescan/filters/record_matcher.py

"""Link tracked wishlist items to entries scraped from sale pages."""

import logging

from pebblescan.config.settings import Settings
from pebblescan.models.sale_stub import MatchResult, SaleStub
from pebblescan.models.tracked_item import TrackedItem

logger = logging.getLogger("pebblescan.filters")


def levenshtein(a: str, b: str) -> int:
    """Edit distance between *a* and *b* using a single rolling row."""
    if len(a) < len(b):
        a, b = b, a
    row = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        diagonal = row[0]
        row[0] = i
        for j, cb in enumerate(b, start=1):
            above = row[j]
            if ca == cb:
                row[j] = diagonal
            else:
                row[j] = min(diagonal, above, row[j - 1]) + 1
            diagonal = above
    return row[len(b)]


def similarity(a: str, b: str) -> float:
    """Normalised similarity in ``[0, 1]``; two empty strings score 1.0."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest


def _url_suffix(url: str) -> str:
    return url.split("/")[-1] if url else ""


def _match_by_url(
    item: TrackedItem, stubs: list[SaleStub],
) -> SaleStub | None:
    if not item.url:
        return None
    for stub in stubs:
        suffix = _url_suffix(stub.url)
        if suffix and suffix in item.url:
            return stub
    return None


def _match_by_title(
    item: TrackedItem, stubs: list[SaleStub],
) -> SaleStub | None:
    title = item.title.lower()
    if not title:
        return None
    for stub in stubs:
        other = stub.title.lower()
        if other and (other in title or title in other):
            return stub
    return None


def _match_fuzzy(
    item: TrackedItem, stubs: list[SaleStub],
) -> tuple[SaleStub, float] | None:
    title = item.title.lower()
    if not title:
        return None
    for stub in stubs:
        score = similarity(title, stub.title.lower())
        if score > Settings.FUZZY_MATCH_THRESHOLD:
            return stub, score
    return None


def match_item(
    item: TrackedItem, stubs: list[SaleStub],
) -> MatchResult | None:
    """Try URL suffix, then title containment, then fuzzy similarity."""
    stub = _match_by_url(item, stubs)
    if stub is not None:
        return MatchResult(tracked=item, stub=stub, strategy="url")

    stub = _match_by_title(item, stubs)
    if stub is not None:
        return MatchResult(
            tracked=item,
            stub=stub,
            strategy="title",
            score=similarity(item.title.lower(), stub.title.lower()),
        )

    fuzzy = _match_fuzzy(item, stubs)
    if fuzzy is not None:
        stub, score = fuzzy
        return MatchResult(
            tracked=item, stub=stub, strategy="fuzzy", score=score
        )
    return None


def match_wishlist_to_sales(
    tracked: list[TrackedItem], stubs: list[SaleStub],
) -> list[MatchResult]:
    """Pair every tracked item with the first sale stub it matches.

    Unmatched items are left out.  One stub may be matched by several
    tracked items.
    """
    matches: list[MatchResult] = []
    for item in tracked:
        result = match_item(item, stubs)
        if result is None:
            continue
        logger.debug(
            "Matched '%s' to '%s' by %s",
            item.title,
            result.stub.title,
            result.strategy,
        )
        matches.append(result)
    logger.info(
        "Matched %d of %d tracked items against %d sale entries",
        len(matches),
        len(tracked),
        len(stubs),
    )
    return matches


def sale_watch_candidates(tracked: list[TrackedItem]) -> list[TrackedItem]:
    """Wishlist items from ACON3D, the only platform with sale pages."""
    return [
        item
        for item in tracked
        if "acon" in item.platform.lower() and item.status == "wishlist"
    ]
