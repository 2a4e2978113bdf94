# tests/test_page_accessor.py

"""Tests for the string and DOM page accessors."""

import unittest

from bs4 import BeautifulSoup

from pebblescan.extractors.page_accessor import (
    DomAccessor,
    StringAccessor,
    is_struck,
    visible_text,
)

_PAGE = """
<html>
<head>
  <title>Cozy Cabin | Shop</title>
  <meta property="og:title" content="Cozy Cabin &amp; Loft">
  <meta name="twitter:title" content="Cabin (twitter)">
  <meta content="John Smith" name="author">
  <script type="application/ld+json">{"@type": "Product", "name": "Cozy"}</script>
  <style>.price { color: red; }</style>
</head>
<body>
  <h1>Cozy <em>Cabin</em></h1>
  <div class="price-box"><span class="price">$12.50</span></div>
  <del>$25.00</del>
  <span style="text-decoration: line-through">$30.00</span>
  <script>var hidden = "$999";</script>
</body>
</html>
"""

URL = "https://example.com/products/cozy-cabin"


class TestVisibleText(unittest.TestCase):
    """visible_text approximates rendered text."""

    def test_block_tags_break_lines(self) -> None:
        text = visible_text("<div>One</div><div>Two <b>bold</b></div>")
        self.assertEqual(text, "One\nTwo bold")

    def test_scripts_and_entities(self) -> None:
        text = visible_text("<p>A&amp;B</p><script>x = 1;</script>")
        self.assertEqual(text, "A&B")


class TestStringAccessor(unittest.TestCase):
    """Regex-only primitives over raw markup."""

    def setUp(self) -> None:
        self.page = StringAccessor(_PAGE, URL)

    def test_not_dom_capable(self) -> None:
        self.assertFalse(self.page.supports_dom)

    def test_meta_by_property_and_name(self) -> None:
        self.assertEqual(self.page.meta_content("og:title"), "Cozy Cabin & Loft")
        self.assertEqual(
            self.page.meta_content("twitter:title"), "Cabin (twitter)"
        )

    def test_meta_with_content_first(self) -> None:
        """Attribute order inside the tag does not matter."""
        self.assertEqual(self.page.meta_content("author"), "John Smith")

    def test_missing_meta(self) -> None:
        self.assertIsNone(self.page.meta_content("og:image"))

    def test_title_and_heading(self) -> None:
        self.assertEqual(self.page.title_tag(), "Cozy Cabin | Shop")
        self.assertEqual(self.page.first_heading(), "Cozy Cabin")

    def test_json_ld_blocks(self) -> None:
        blocks = self.page.json_ld_blocks()
        self.assertEqual(len(blocks), 1)
        self.assertIn('"Product"', blocks[0])

    def test_struck_texts(self) -> None:
        self.assertEqual(self.page.struck_texts(), ["$25.00", "$30.00"])

    def test_body_text_excludes_head_and_scripts(self) -> None:
        text = self.page.body_text()
        self.assertIn("$12.50", text)
        self.assertNotIn("Shop", text)
        self.assertNotIn("$999", text)

    def test_price_text_drops_struck_prices(self) -> None:
        text = self.page.price_text()
        self.assertIn("$12.50", text)
        self.assertNotIn("$25.00", text)
        self.assertNotIn("$30.00", text)

    def test_dom_primitives_are_empty(self) -> None:
        self.assertEqual(self.page.select(".price"), [])
        self.assertIsNone(self.page.select_one(".price"))
        self.assertEqual(list(self.page.elements()), [])


class TestDomAccessor(unittest.TestCase):
    """BeautifulSoup-backed primitives."""

    def setUp(self) -> None:
        self.page = DomAccessor(_PAGE, URL)

    def test_dom_capable(self) -> None:
        self.assertTrue(self.page.supports_dom)

    def test_accepts_parsed_soup(self) -> None:
        soup = BeautifulSoup(_PAGE, "lxml")
        page = DomAccessor(soup, URL)
        self.assertIs(page.soup, soup)

    def test_meta_and_title(self) -> None:
        self.assertEqual(self.page.meta_content("og:title"), "Cozy Cabin & Loft")
        self.assertEqual(self.page.title_tag(), "Cozy Cabin | Shop")
        self.assertEqual(self.page.first_heading(), "Cozy Cabin")

    def test_struck_texts(self) -> None:
        self.assertEqual(self.page.struck_texts(), ["$25.00", "$30.00"])

    def test_price_text_drops_struck_prices(self) -> None:
        text = self.page.price_text()
        self.assertIn("$12.50", text)
        self.assertNotIn("$25.00", text)
        self.assertNotIn("$30.00", text)
        self.assertIn("$25.00", self.page.body_text())

    def test_is_struck(self) -> None:
        del_el = self.page.select_one("del")
        price_el = self.page.select_one("span.price")
        assert del_el is not None and price_el is not None
        self.assertTrue(is_struck(del_el))
        self.assertFalse(is_struck(price_el))

    def test_select(self) -> None:
        el = self.page.select_one(".price")
        self.assertIsNotNone(el)
        assert el is not None
        self.assertEqual(el.get_text(), "$12.50")

    def test_elements_iterates_tags(self) -> None:
        names = {el.name for el in self.page.elements()}
        self.assertIn("span", names)
        self.assertIn("del", names)


if __name__ == "__main__":
    unittest.main()
