# pebblescan/filters/deduplicator.py

"""Sale stub deduplication by exact URL."""

import logging

from pebblescan.models.sale_stub import SaleStub

logger = logging.getLogger("pebblescan.filters")


class SaleStubDeduplicator:
    """Collapse stubs that share a URL."""

    @staticmethod
    def deduplicate(
        stubs: list[SaleStub],
    ) -> tuple[list[SaleStub], int]:
        """Remove duplicate stubs, the last one seen for a URL wins.

        The kept stub takes the position of the URL's first
        occurrence, so the order of distinct URLs is preserved.

        Returns the deduplicated list and the count of removed dupes.
        """
        if not stubs:
            return [], 0

        by_url: dict[str, SaleStub] = {}
        for stub in stubs:
            by_url[stub.url] = stub

        kept = list(by_url.values())
        removed = len(stubs) - len(kept)
        if removed:
            logger.debug(
                "Deduplication removed %d duplicate sale stubs",
                removed,
            )
        return kept, removed
