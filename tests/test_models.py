"""
Tests for data models.
"""

import pytest

from responsive_merge.exceptions import MergeConfigError
from responsive_merge.models import (
    BreakpointAnalysis,
    BreakpointConfig,
    Element,
    MatchMethod,
    MatchRecord,
    MergeConfig,
    Variant,
)


def test_element_tokens_from_class_string():
    """Test that a class string is split and deduplicated in order."""
    element = Element(tag="div", tokens="flex  gap-4 flex items-center")
    assert element.tokens == ["flex", "gap-4", "items-center"]
    assert element.class_name == "flex gap-4 items-center"


def test_element_children_are_numbered():
    """Test that children get their sibling index."""
    element = Element(tag="ul", children=[Element(tag="li"), Element(tag="li"), Element(tag="li")])
    assert [child.sibling_index for child in element.children] == [0, 1, 2]


def test_element_add_token_is_idempotent():
    element = Element(tag="div", tokens=["flex"])

    assert element.add_token("max-md:flex-col") is True
    assert element.add_token("max-md:flex-col") is False
    assert element.tokens == ["flex", "max-md:flex-col"]


def test_element_iteration_is_preorder():
    root = Element(tag="a", children=[
        Element(tag="b", children=[Element(tag="c")]),
        Element(tag="d"),
    ])
    assert [e.tag for e in root.iter_elements()] == ["a", "b", "c", "d"]
    assert root.count_elements() == 4


def test_breakpoint_config_defaults():
    """Test desktop-first breakpoint defaults."""
    breakpoints = BreakpointConfig.desktop_first()
    assert breakpoints.medium_max_width == 1024
    assert breakpoints.narrow_max_width == 768
    assert breakpoints.scoped(Variant.MEDIUM, "gap-4") == "max-lg:gap-4"
    assert breakpoints.scoped(Variant.NARROW, "gap-2") == "max-md:gap-2"
    assert breakpoints.scoped(Variant.WIDE, "gap-8") == "gap-8"
    assert breakpoints.media_query(Variant.NARROW) == "(max-width: 768px)"
    assert breakpoints.media_query(Variant.WIDE) is None


def test_breakpoint_config_rejects_inverted_thresholds():
    breakpoints = BreakpointConfig.from_widths(medium_max_width=600, narrow_max_width=900)
    with pytest.raises(MergeConfigError):
        breakpoints.ensure_consistent()


def test_merge_config_rejects_bad_similarity():
    config = MergeConfig(similarity_threshold=1.5)
    with pytest.raises(MergeConfigError) as exc_info:
        config.ensure_consistent()
    assert exc_info.value.field == "similarity_threshold"


def test_merge_config_from_env(monkeypatch):
    """Test configuration read from environment variables."""
    monkeypatch.setenv("RESPONSIVE_MERGE_MEDIUM_MAX_WIDTH", "1100")
    monkeypatch.setenv("RESPONSIVE_MERGE_NARROW_MAX_WIDTH", "640")
    monkeypatch.setenv("RESPONSIVE_MERGE_DISABLED_PASSES", "add-horizontal-scroll, inject-visibility")
    monkeypatch.setenv("RESPONSIVE_MERGE_SIMILARITY_THRESHOLD", "0.9")

    config = MergeConfig.from_env()

    assert config.breakpoints.medium_max_width == 1100
    assert config.breakpoints.narrow_max_width == 640
    assert config.similarity_threshold == 0.9
    assert not config.is_enabled("add-horizontal-scroll")
    assert not config.is_enabled("inject-visibility")
    assert config.is_enabled("detect-class-conflicts")


def test_match_record_is_frozen():
    record = MatchRecord(wide_key="Card", wide_position=0, tag="div", identity="Card",
                         medium_position=3, medium_method=MatchMethod.BY_IDENTITY)
    assert record.is_matched(Variant.MEDIUM)
    assert not record.is_matched(Variant.NARROW)
    assert record.method == MatchMethod.BY_IDENTITY
    with pytest.raises(Exception):
        record.medium_position = 4


def test_breakpoint_analysis_assessment():
    assert BreakpointAnalysis(feasibility_score=95.0).assessment == "excellent"
    assert BreakpointAnalysis(feasibility_score=70.0).assessment == "good"
    assert BreakpointAnalysis(feasibility_score=40.0).assessment == "moderate"
