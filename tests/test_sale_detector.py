# tests/test_sale_detector.py

"""Tests for discount detection and original-price derivation."""

import unittest
from unittest.mock import MagicMock, patch

from pebblescan.extractors.page_accessor import DomAccessor, StringAccessor
from pebblescan.extractors.sale_detector import (
    detect_sale,
    percent_off_original,
    struck_candidates,
    was_phrase_candidate,
)
from pebblescan.models.listing import SaleInfo

URL = "https://example.com/item"


def _page(body: str) -> StringAccessor:
    return StringAccessor(f"<html><body>{body}</body></html>", URL)


class TestCandidates(unittest.TestCase):
    """Individual signals."""

    def test_struck_candidates(self) -> None:
        page = _page("<del>$120.00</del><s>$100</s><strike>n/a</strike>")
        self.assertEqual(struck_candidates(page), [120.0, 100.0])

    def test_long_struck_text_ignored(self) -> None:
        """Strikethrough paragraphs are not prices."""
        page = _page(f"<del>{'blah ' * 12} $300</del>")
        self.assertEqual(struck_candidates(page), [])

    def test_was_phrase_before_amount(self) -> None:
        page = _page("<p>Originally: $80</p>")
        self.assertEqual(was_phrase_candidate(page, 60.0), 80.0)

    def test_was_phrase_after_amount(self) -> None:
        page = _page("<p>80.00 USD (was)</p>")
        self.assertEqual(was_phrase_candidate(page, 60.0), 80.0)

    def test_was_phrase_below_current(self) -> None:
        page = _page("<p>was $40</p>")
        self.assertIsNone(was_phrase_candidate(page, 50.0))

    def test_percent_back_calculation(self) -> None:
        """80 at "20% off" comes from 100."""
        page = _page("<p>Save 20% off today</p>")
        self.assertEqual(percent_off_original(page, 80.0), 100.0)

    def test_percent_bounds(self) -> None:
        self.assertIsNone(percent_off_original(_page("<p>100% off</p>"), 5.0))
        self.assertIsNone(percent_off_original(_page("<p>0% discount</p>"), 5.0))

    def test_percent_rounded(self) -> None:
        page = _page("<p>30% off</p>")
        self.assertEqual(percent_off_original(page, 10.0), 14.29)


class TestDetectSale(unittest.TestCase):
    """Combined decision and the price-order invariant."""

    def test_highest_explicit_candidate_wins(self) -> None:
        page = _page("<del>$120</del><del>$100</del><p>was $110</p>")
        info = detect_sale(page, 90.0)
        self.assertEqual(info, SaleInfo(original_price=120.0, is_on_sale=True))

    def test_explicit_beats_percentage(self) -> None:
        page = _page("<del>$150</del><p>50% off</p>")
        self.assertEqual(detect_sale(page, 100.0).original_price, 150.0)

    def test_percentage_when_explicit_not_above(self) -> None:
        """A struck price below current does not block the percentage."""
        page = _page("<del>$50</del><p>20% off</p>")
        info = detect_sale(page, 80.0)
        self.assertTrue(info.is_on_sale)
        self.assertEqual(info.original_price, 100.0)

    def test_decimal_percentage_not_misread(self) -> None:
        """A decimal percentage such as 20.5% is not read as 5%."""
        self.assertIsNone(percent_off_original(_page("<p>20.5% off</p>"), 80.0))
        self.assertEqual(detect_sale(_page("<p>20.5% off</p>"), 80.0), SaleInfo())

    def test_no_signals(self) -> None:
        self.assertEqual(detect_sale(_page("<p>$10</p>"), 10.0), SaleInfo())

    def test_missing_price(self) -> None:
        page = _page("<del>$120</del>")
        self.assertEqual(detect_sale(page, None), SaleInfo())
        self.assertEqual(detect_sale(page, 0), SaleInfo())

    def test_class_only_flag_on_dom(self) -> None:
        """A sale badge with no numbers flags the listing without a price."""
        html = '<html><body><div class="sale-badge">Hot</div></body></html>'
        info = detect_sale(DomAccessor(html, URL), 10.0)
        self.assertTrue(info.is_on_sale)
        self.assertIsNone(info.original_price)

    def test_class_only_ignored_on_string_path(self) -> None:
        html = '<html><body><div class="sale-badge">Hot</div></body></html>'
        self.assertEqual(detect_sale(StringAccessor(html, URL), 10.0), SaleInfo())

    @patch("pebblescan.extractors.sale_detector.Settings")
    def test_class_only_flag_can_be_disabled(self, mock_settings: MagicMock) -> None:
        mock_settings.FLAG_CLASS_ONLY_SALES = False
        html = '<html><body><div class="sale-badge">Hot</div></body></html>'
        self.assertEqual(detect_sale(DomAccessor(html, URL), 10.0), SaleInfo())

    @patch("pebblescan.extractors.sale_detector.struck_candidates")
    def test_internal_fault_degrades(self, mock_struck: MagicMock) -> None:
        """Detector faults never escape: the result is just "not on sale"."""
        mock_struck.side_effect = RuntimeError("boom")
        self.assertEqual(detect_sale(_page("<del>$99</del>"), 10.0), SaleInfo())

    def test_original_always_above_current(self) -> None:
        for body in (
            "<del>$10</del>",
            "<p>was $5</p>",
            "<del>$9.99</del><p>was $10</p>",
        ):
            with self.subTest(body=body):
                info = detect_sale(_page(body), 10.0)
                if info.original_price is not None:
                    self.assertGreater(info.original_price, 10.0)
                else:
                    self.assertFalse(info.is_on_sale)


if __name__ == "__main__":
    unittest.main()
