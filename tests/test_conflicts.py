"""
Tests for style conflict detection.
"""

from responsive_merge.merge.conflicts import detect_class_conflicts, detect_conflicts_for_element
from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.matcher import match_elements
from responsive_merge.merge.tokens import TokenParser
from responsive_merge.models import BreakpointConfig, Element, MergeConfig


def parser():
    return TokenParser(BreakpointConfig())


def test_exclusive_group_conflict():
    """flex-row / flex-row / flex-col yields exactly one flexDirection record."""
    conflicts = detect_conflicts_for_element(
        "Row",
        ["flex", "flex-row"],
        ["flex", "flex-row"],
        ["flex", "flex-col"],
        parser(),
    )
    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.group == "flexDirection"
    assert conflict.kind == "exclusive"
    assert (conflict.wide_value, conflict.medium_value, conflict.narrow_value) == ("flex-row", "flex-row", "flex-col")


def test_no_conflict_when_values_agree():
    assert detect_conflicts_for_element("A", ["block", "w-10"], ["block", "w-10"], ["block", "w-10"], parser()) == []


def test_pattern_group_lists_all_values():
    conflicts = detect_conflicts_for_element(
        "Card",
        ["w-[300px]", "max-lg:w-full"],
        ["w-full"],
        ["w-full"],
        parser(),
    )
    assert [c.group for c in conflicts] == ["width"]
    assert conflicts[0].wide_value == ["w-[300px]", "max-lg:w-full"]
    assert conflicts[0].narrow_value == ["w-full"]


def test_grow_does_not_capture_unrelated_tokens():
    conflicts = detect_conflicts_for_element("A", ["grow"], ["grow"], ["grow-0"], parser())
    assert [c.group for c in conflicts] == ["grow"]


def test_merge_only_families_are_not_reported():
    assert detect_conflicts_for_element("A", ["gap-8"], ["gap-4"], ["gap-2"], parser()) == []


def test_detect_class_conflicts_only_for_elements_matched_in_both():
    wide = Element(tag="div", identity="Root", tokens="flex flex-row", children=[
        Element(tag="aside", identity="Side", tokens="block"),
    ])
    medium = Element(tag="div", identity="Root", tokens="flex flex-row")
    narrow = Element(tag="div", identity="Root", tokens="flex flex-col", children=[
        Element(tag="aside", identity="Side", tokens="hidden"),
    ])
    context = MergeContext(wide, medium, narrow, MergeConfig())
    match_elements(context)

    stats = detect_class_conflicts(context)

    assert stats["elements_with_conflicts"] == 1
    assert stats["total_conflicts"] == 1
    assert list(context.conflicts) == ["Root"]
    assert context.stats.conflicts_resolved == 1
