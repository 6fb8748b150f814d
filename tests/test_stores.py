"""
Tests for inkwell/stores: search state synchronized with the URL, and the
UI theme store.
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from inkwell.navigation import Navigator, safe_next_url
from inkwell.stores.search import SearchStore, SortOrder
from inkwell.stores.ui import Theme, UIStore


class TestSearchStore(unittest.TestCase):

    def setUp(self):
        self.navigator = Navigator("/search?tag=python")
        self.store = SearchStore(self.navigator)

    def test_defaults(self):
        self.assertEqual(self.store.keyword, "")
        self.assertEqual(self.store.tag, "")
        self.assertEqual(self.store.sort_order, SortOrder.COMPREHENSIVE)

    def test_update_keyword_trims_and_syncs_url(self):
        self.assertTrue(self.store.update_keyword_and_url("  flask tips "))
        self.assertEqual(self.store.keyword, "flask tips")
        self.assertEqual(self.navigator.get_query_param("q"), "flask tips")
        # other parameters survive
        self.assertEqual(self.navigator.get_query_param("tag"), "python")
        self.assertEqual(self.navigator.path, "/search")

    def test_blank_keyword_is_noop(self):
        self.store.update_keyword_and_url("first")
        history = list(self.navigator.history)
        for blank in ("", "   ", "\t\n"):
            self.assertFalse(self.store.update_keyword_and_url(blank))
        self.assertEqual(self.store.keyword, "first")
        self.assertEqual(self.navigator.history, history)

    def test_keyword_matches_url_after_each_update(self):
        for word in ("a", " b ", "c d"):
            self.store.update_keyword_and_url(word)
            self.assertEqual(self.store.keyword, self.navigator.get_query_param("q"))

    def test_update_keeps_blank_and_repeated_params_and_fragment(self):
        navigator = Navigator("/search?tag=&lang=py&lang=go#top")
        store = SearchStore(navigator)
        store.update_keyword_and_url("rust")
        self.assertEqual(navigator.current_url, "/search?tag=&lang=py&lang=go&q=rust#top")

        # an existing q is replaced where it stands
        navigator.push("/search?q=old&lang=py&q=older#top")
        store.update_keyword_and_url("new")
        self.assertEqual(navigator.current_url, "/search?q=new&lang=py#top")

    def test_sort_order_accepts_enum_or_string(self):
        self.store.set_sort_order("hottest")
        self.assertEqual(self.store.sort_order, SortOrder.HOTTEST)
        self.store.set_sort_order(SortOrder.LATEST)
        self.assertEqual(self.store.sort_order, SortOrder.LATEST)
        with self.assertRaises(ValueError):
            self.store.set_sort_order("random")

    def test_sync_from_url(self):
        self.navigator.push("/search?q=%20rust%20&sort=bogus&tag=systems")
        self.store.sync_from_url()
        self.assertEqual(self.store.keyword, "rust")
        self.assertEqual(self.store.tag, "systems")
        self.assertEqual(self.store.sort_order, SortOrder.COMPREHENSIVE)
        self.assertEqual(self.store.as_query(), {"q": "rust", "sort": "comprehensive", "tag": "systems"})


class TestNavigator(unittest.TestCase):

    def test_push_and_back(self):
        nav = Navigator()
        nav.push("/a")
        nav.push("/b?x=1")
        self.assertEqual(nav.query_params, {"x": "1"})
        self.assertEqual(nav.back(), "/a")
        self.assertEqual(nav.back(), "/")
        self.assertEqual(nav.back(), "/")

    def test_safe_next_url(self):
        self.assertEqual(safe_next_url("/accountCenter?tab=1"), "/accountCenter?tab=1")
        for bad in (None, "", "http://evil.example", "//evil.example", "javascript:alert(1)", "relative", "/\\evil.example", "/\\\\evil.example"):
            self.assertIsNone(safe_next_url(bad))


class TestUIStore(unittest.TestCase):

    def test_toggle_and_set(self):
        ui = UIStore()
        self.assertEqual(ui.theme, Theme.LIGHT)
        self.assertEqual(ui.toggle_theme(), Theme.DARK)
        self.assertEqual(ui.toggle_theme(), Theme.LIGHT)
        ui.set_theme("dark")
        self.assertEqual(ui.theme, Theme.DARK)
        with self.assertRaises(ValueError):
            ui.set_theme("sepia")


if __name__ == "__main__":
    unittest.main()
