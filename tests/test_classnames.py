"""Tests for the class-name merge utility."""
from __future__ import annotations

import pytest

from utils.classnames import class_group, class_names, cn, merge_classes


class TestCn:
    def test_merges_class_names(self):
        assert cn("px-2 py-1", "bg-red-500") == "px-2 py-1 bg-red-500"

    def test_later_padding_wins(self):
        assert cn("px-2 py-1", "px-4") == "py-1 px-4"

    def test_skips_false_condition(self):
        assert cn("px-2", False and "py-1", "bg-red-500") == "px-2 bg-red-500"

    def test_skips_none(self):
        assert cn("px-2", None, None, "py-1") == "px-2 py-1"

    def test_flattens_lists(self):
        assert cn(["px-2", "py-1"], "bg-red-500") == "px-2 py-1 bg-red-500"

    def test_no_arguments(self):
        assert cn() == ""

    def test_mapping_conditions(self):
        assert cn("btn", {"btn-active": True, "btn-disabled": False}) == "btn btn-active"

    def test_nested_sequences(self):
        assert cn(["px-2", ("py-1", ["text-sm"])]) == "px-2 py-1 text-sm"


class TestMergeClasses:
    @pytest.mark.parametrize(
        "classes, expected",
        [
            ("p-2 p-4", "p-4"),
            ("px-2 p-4", "p-4"),
            ("p-4 px-2", "p-4 px-2"),
            ("pt-2 py-4", "py-4"),
            ("bg-red-500 bg-blue-500", "bg-blue-500"),
            ("text-sm text-lg", "text-lg"),
            ("text-sm text-red-500", "text-sm text-red-500"),
            ("font-bold font-normal", "font-normal"),
            ("block flex", "flex"),
            ("flex flex-col", "flex flex-col"),
            ("rounded rounded-lg", "rounded-lg"),
            ("border border-2", "border-2"),
            ("border-2 border-red-500", "border-2 border-red-500"),
            ("ring-2 ring-4", "ring-4"),
            ("ring-2 ring-blue-500", "ring-2 ring-blue-500"),
            ("ring-2 ring-offset-2", "ring-2 ring-offset-2"),
            ("ring-offset-2 ring-offset-white", "ring-offset-2 ring-offset-white"),
            ("ring-offset-1 ring-offset-4", "ring-offset-4"),
            ("justify-between justify-center", "justify-center"),
            ("justify-between justify-items-center", "justify-between justify-items-center"),
            ("justify-self-end justify-start", "justify-self-end justify-start"),
            ("object-cover object-contain", "object-contain"),
            ("object-cover object-center", "object-cover object-center"),
            ("outline-dashed outline-2 outline-red-500", "outline-dashed outline-2 outline-red-500"),
            ("outline-2 outline-4", "outline-4"),
            ("outline outline-dotted", "outline-dotted"),
        ],
    )
    def test_conflicts(self, classes, expected):
        assert merge_classes(classes) == expected

    def test_variants_do_not_conflict_with_base(self):
        assert merge_classes("px-2 hover:px-4") == "px-2 hover:px-4"

    def test_same_variants_conflict_regardless_of_order(self):
        assert merge_classes("hover:md:px-2 md:hover:px-4") == "md:hover:px-4"

    def test_important_is_separate_group(self):
        assert merge_classes("!px-2 px-4") == "!px-2 px-4"

    def test_unknown_classes_are_kept(self):
        assert merge_classes("foo px-2 bar px-4") == "foo bar px-4"

    def test_arbitrary_values(self):
        assert merge_classes("min-h-[200px] min-h-screen") == "min-h-screen"

    def test_whitespace_is_normalized(self):
        assert merge_classes("  px-2   py-1 ") == "px-2 py-1"


class TestClassNames:
    def test_join_without_merging(self):
        assert class_names("px-2", "px-4") == "px-2 px-4"

    def test_zero_is_skipped(self):
        assert class_names("a", 0, 0.0) == "a"
        assert cn("a", 0) == "a"

    def test_non_zero_numbers_are_kept(self):
        assert class_names("a", 1) == "a 1"

    def test_empty_strings_skipped(self):
        assert class_names("", "  ", "a") == "a"


class TestClassGroup:
    def test_negative_values(self):
        assert class_group("-mt-2") == class_group("mt-4") == "mt"

    def test_unknown(self):
        assert class_group("btn-primary") is None
