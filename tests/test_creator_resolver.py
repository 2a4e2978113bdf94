# tests/test_creator_resolver.py

"""Tests for seller/brand resolution."""

import unittest
from unittest.mock import MagicMock, patch

from pebblescan.extractors.creator_resolver import accept_creator, resolve_creator
from pebblescan.extractors.page_accessor import DomAccessor, StringAccessor

URL = "https://example.com/item/1"


def _html(head: str = "", body: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


class TestAcceptCreator(unittest.TestCase):
    """Candidate normalisation and rejection."""

    def test_whitespace_collapsed(self) -> None:
        self.assertEqual(accept_creator("  Jane   Doe "), "Jane Doe")

    def test_length_bounds(self) -> None:
        self.assertIsNone(accept_creator("A"))
        self.assertEqual(accept_creator("AB"), "AB")
        self.assertIsNone(accept_creator("X" * 51))

    def test_embedded_newline_rejected(self) -> None:
        self.assertIsNone(accept_creator("Jane\nDoe"))

    def test_noise_tokens(self) -> None:
        for noise in ("3 days", "12h", "50%", "Sale", "productName",
                      "brand_name", "Author", "wrapper"):
            with self.subTest(noise=noise):
                self.assertIsNone(accept_creator(noise))

    def test_empty(self) -> None:
        self.assertIsNone(accept_creator(None))
        self.assertIsNone(accept_creator("   "))


class TestResolveCreator(unittest.TestCase):
    """Cascade order across platforms and page kinds."""

    def test_meta_author(self) -> None:
        html = _html(head='<meta name="author" content="Jane Doe">')
        self.assertEqual(resolve_creator(StringAccessor(html, URL)), "Jane Doe")

    def test_article_author(self) -> None:
        html = _html(head='<meta property="article:author" content="Kai Lee">')
        self.assertEqual(resolve_creator(StringAccessor(html, URL)), "Kai Lee")

    def test_labelled_text(self) -> None:
        html = _html(body="<p>Created by Studio Nine</p>")
        self.assertEqual(
            resolve_creator(StringAccessor(html, URL)), "Studio Nine"
        )

    def test_noise_rejected_cascade_continues(self) -> None:
        """A rejected meta author does not stop the later strategies."""
        html = _html(
            head='<meta name="author" content="sale">',
            body="<p>Seller: Nova Art</p>",
        )
        self.assertEqual(resolve_creator(StringAccessor(html, URL)), "Nova Art")

    def test_acon_brand_label(self) -> None:
        html = _html(body="<div>Brand: PixelHouse</div>")
        page = StringAccessor(html, "https://www.acon3d.com/en/product/123")
        self.assertEqual(resolve_creator(page, "ACON3D"), "PixelHouse")

    def test_acon_korean_brand_label(self) -> None:
        html = _html(body="<div>브랜드: 픽셀하우스</div>")
        page = StringAccessor(html, "https://www.acon3d.com/ko/product/123")
        self.assertEqual(resolve_creator(page, "ACON3D"), "픽셀하우스")

    def test_acon_brand_link_dom(self) -> None:
        html = _html(body='<a href="/en/brand/77">Moon Works</a>')
        page = DomAccessor(html, "https://www.acon3d.com/en/product/123")
        self.assertEqual(resolve_creator(page, "ACON3D"), "Moon Works")

    def test_csp_author_dom(self) -> None:
        html = _html(body='<div class="authorTop__name"> Mika </div>')
        page = DomAccessor(html, "https://assets.clip-studio.com/en-us/detail?id=1")
        self.assertEqual(resolve_creator(page, "CSP Asset"), "Mika")

    def test_dom_selector_only_on_dom_path(self) -> None:
        html = _html(body='<span class="author-name">Lee Art</span>')
        self.assertEqual(resolve_creator(StringAccessor(html, URL)), "")
        self.assertEqual(resolve_creator(DomAccessor(html, URL)), "Lee Art")

    def test_data_attribute_preferred(self) -> None:
        html = _html(body='<div data-creator="Orbit Lab">View profile</div>')
        self.assertEqual(resolve_creator(DomAccessor(html, URL)), "Orbit Lab")

    def test_nothing_found(self) -> None:
        self.assertEqual(resolve_creator(StringAccessor(_html(), URL)), "")

    @patch("pebblescan.extractors.creator_resolver.first_success")
    def test_internal_fault_returns_empty(self, mock_first: MagicMock) -> None:
        mock_first.side_effect = RuntimeError("boom")
        self.assertEqual(resolve_creator(StringAccessor(_html(), URL)), "")


if __name__ == "__main__":
    unittest.main()
