# tests/test_file_manager.py

"""Tests for the FileManager storage module."""

import csv
import json
import tempfile
import unittest
from pathlib import Path

from pebblescan.models.listing import ExtractedListing
from pebblescan.models.sale_stub import MatchResult, SaleStub
from pebblescan.models.tracked_item import TrackedItem
from pebblescan.storage.file_manager import FileManager


class TestFileManager(unittest.TestCase):
    """JSON/CSV save, load and export."""

    def setUp(self) -> None:
        """Set up a temp directory for results."""
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp_dir = Path(self._tmp.name)
        self.fm = FileManager(self.tmp_dir / "results")

    def _stubs(self) -> list[SaleStub]:
        return [
            SaleStub("Forest", "https://www.acon3d.com/en/product/1"),
            SaleStub("Harbor", "https://www.acon3d.com/en/product/2", "https://cdn/2.jpg"),
        ]

    def test_results_dir_created(self) -> None:
        self.assertTrue((self.tmp_dir / "results").is_dir())

    def test_save_sales_snapshot_shape(self) -> None:
        path = self.fm.save_sales(self._stubs())
        self.assertTrue(path.name.startswith("sales_"))
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["count"], 2)
        self.assertIn("lastUpdated", data)
        self.assertEqual(data["items"][1]["thumbnailUrl"], "https://cdn/2.jpg")

    def test_sales_roundtrip(self) -> None:
        path = self.fm.save_sales(self._stubs())
        self.assertEqual(self.fm.load_sales(path), self._stubs())

    def test_load_sales_plain_list(self) -> None:
        path = self.tmp_dir / "plain.json"
        path.write_text(json.dumps([{"title": "A", "url": "u"}]), encoding="utf-8")
        self.assertEqual(self.fm.load_sales(path), [SaleStub("A", "u")])

    def test_latest_sales_file(self) -> None:
        self.assertIsNone(self.fm.latest_sales_file())
        path = self.fm.save_sales(self._stubs())
        self.assertEqual(self.fm.latest_sales_file(), path)

    def test_load_tracked_items(self) -> None:
        path = self.tmp_dir / "tracked.json"
        path.write_text(
            json.dumps(
                {"items": [{"url": "u", "title": "Kitchen", "currentPrice": 12}]}
            ),
            encoding="utf-8",
        )
        items = self.fm.load_tracked_items(path)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].current_price, 12.0)

    def test_load_tracked_items_with_partial_history(self) -> None:
        path = self.tmp_dir / "tracked.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "url": "u",
                        "title": "Kitchen",
                        "currentPrice": 10,
                        "priceHistory": [{"price": 10, "currency": "$"}],
                    }
                ]
            ),
            encoding="utf-8",
        )
        items = self.fm.load_tracked_items(path)
        self.assertEqual(items[0].title, "Kitchen")
        self.assertEqual(items[0].price_history, [])

    def test_load_tracked_items_rejects_scalar(self) -> None:
        path = self.tmp_dir / "bad.json"
        path.write_text("42", encoding="utf-8")
        with self.assertRaises(ValueError):
            self.fm.load_tracked_items(path)

    def test_save_tracked_items_roundtrip(self) -> None:
        path = self.tmp_dir / "tracked.json"
        items = [TrackedItem(url="u", title="T", current_price=3.0, id="1")]
        self.fm.save_tracked_items(items, path)
        self.assertEqual(self.fm.load_tracked_items(path), items)

    def test_save_listing(self) -> None:
        path = self.fm.save_listing(
            ExtractedListing(url="u", title="Neon Alley", price=5.0)
        )
        with open(path, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["title"], "Neon Alley")

    def test_save_and_export_matches(self) -> None:
        matches = [
            MatchResult(
                tracked=TrackedItem(url="u", title="Forest", current_price=10.0),
                stub=self._stubs()[0],
                strategy="title",
            )
        ]
        json_path = self.fm.save_matches(matches)
        with open(json_path, encoding="utf-8") as f:
            self.assertEqual(json.load(f)[0]["strategy"], "title")

        csv_path = self.fm.export_matches_csv(matches)
        with open(csv_path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0][0], "Tracked Title")
        self.assertEqual(rows[1][:4], ["Forest", "Forest", "title", "1.00"])


if __name__ == "__main__":
    unittest.main()
