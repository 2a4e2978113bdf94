# pebblescan/extractors/cascade.py

"""Ordered "first success wins" evaluation of extraction strategies."""

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from pebblescan.extractors.page_accessor import PageAccessor

logger = logging.getLogger("pebblescan.extractors")

T = TypeVar("T")

Strategy = Callable[[PageAccessor], T | None]


def first_success(
    strategies: Sequence[Strategy[T]],
    page: PageAccessor,
    field_name: str,
) -> T | None:
    """Run *strategies* in order and return the first non-``None`` value.

    A strategy that raises is logged and treated as a miss, so one
    broken heuristic never hides the ones after it.
    """
    for strategy in strategies:
        name = getattr(strategy, "__name__", repr(strategy))
        try:
            value = strategy(page)
        except Exception:
            logger.debug(
                "Strategy %s for %s raised on %s",
                name,
                field_name,
                page.url,
                exc_info=True,
            )
            continue
        if value is not None:
            logger.debug(
                "%s resolved by %s on %s", field_name, name, page.url
            )
            return value
    logger.debug("%s unresolved on %s", field_name, page.url)
    return None
