"""
Unit Tests for the Selection Resolver

Tests index and exact-name selection, including out-of-range numbers,
unknown names with suggestions, and ambiguous names.
"""

import os
import sys
import unittest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from src.core.errors import (
    AmbiguousSelectionError,
    SelectionNotFoundError,
    SelectionOutOfRangeError,
)
from src.core.selection_resolver import (
    SelectableItem,
    build_selectable_items,
    format_selection_table,
    resolve_selection,
)


def make_items(names):
    return [SelectableItem(i, name, {"Name": name, "Identity": f"id-{i}"})
            for i, name in enumerate(names, start=1)]


class TestResolveSelection(unittest.TestCase):
    """Test resolve_selection"""

    def setUp(self):
        self.items = make_items(["Microsoft Rule Package", "Contoso", "Finance", "HR", "Legal"])

    def test_numeric_token_is_one_based(self):
        """'2' selects the second displayed item"""
        selected = resolve_selection(self.items, "2")
        self.assertEqual(selected.index, 2)
        self.assertIs(selected, self.items[1])

    def test_numeric_token_with_whitespace(self):
        self.assertEqual(resolve_selection(self.items, " 5 ").name, "Legal")

    def test_out_of_range(self):
        """Numbers outside 1..N fail"""
        for token in ("6", "0", "-1"):
            with self.assertRaises(SelectionOutOfRangeError, msg=token):
                resolve_selection(self.items, token)

    def test_number_like_names_are_not_indexes(self):
        """Only plain digits select by number; other numeric forms match names"""
        items = make_items([f"P{n}" for n in range(1, 11)] + ["1_0", "+2", "٣"])
        self.assertEqual(resolve_selection(items, "1_0").index, 11)
        self.assertEqual(resolve_selection(items, "+2").index, 12)
        self.assertEqual(resolve_selection(items, "٣").index, 13)
        self.assertEqual(resolve_selection(items, "10").name, "P10")

    def test_exact_name(self):
        self.assertEqual(resolve_selection(self.items, "Finance").index, 3)

    def test_name_is_case_sensitive(self):
        """Matching is exact; a different case is not a match"""
        with self.assertRaises(SelectionNotFoundError):
            resolve_selection(self.items, "finance")

    def test_unknown_name_suggests(self):
        """Close names are offered in the error, never selected"""
        with self.assertRaises(SelectionNotFoundError) as ctx:
            resolve_selection(self.items, "Finanse")
        self.assertIn("Finance", ctx.exception.suggestions)
        self.assertIn("did you mean", str(ctx.exception))

    def test_duplicate_names_are_ambiguous(self):
        """Two items named 'Finance' cannot be chosen by name"""
        items = make_items(["Finance", "HR", "Finance"])
        with self.assertRaises(AmbiguousSelectionError) as ctx:
            resolve_selection(items, "Finance")
        self.assertEqual(ctx.exception.indexes, [1, 3])
        self.assertIn("select by number", str(ctx.exception))

    def test_duplicate_default_packages(self):
        """[(1, 'Default'), (2, 'Default')] with 'Default' is ambiguous"""
        items = make_items(["Default", "Default"])
        with self.assertRaises(AmbiguousSelectionError):
            resolve_selection(items, "Default")
        self.assertEqual(resolve_selection(items, "2").index, 2)

    def test_empty_token(self):
        with self.assertRaises(SelectionNotFoundError):
            resolve_selection(self.items, "  ")

    def test_empty_list(self):
        with self.assertRaises(SelectionOutOfRangeError):
            resolve_selection([], "1")


class TestBuildSelectableItems(unittest.TestCase):
    """Test numbering and display-name resolution"""

    def test_names_and_numbering(self):
        objects = [
            {"Name": "Microsoft Rule Package", "Identity": "a"},
            {"Name": "  ", "RulePackageName": "Contoso Rules", "Identity": "b"},
            {"Identity": "c"},
            {},
        ]
        items = build_selectable_items(objects, ["Name", "RulePackageName"], ["Identity"])
        self.assertEqual([i.index for i in items], [1, 2, 3, 4])
        self.assertEqual([i.name for i in items],
                         ["Microsoft Rule Package", "Contoso Rules", "c", "(unnamed)"])
        self.assertIs(items[0].item, objects[0])

    def test_format_selection_table(self):
        table = format_selection_table(make_items(["A", "B"]))
        self.assertEqual(table.splitlines(), ["  [1] A", "  [2] B"])
        self.assertEqual(format_selection_table([]), "(no items)")


if __name__ == '__main__':
    unittest.main()
