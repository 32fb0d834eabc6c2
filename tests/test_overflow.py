"""
Tests for horizontal-scroll annotation.
"""

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.matcher import match_elements
from responsive_merge.merge.overflow import FIXED_WIDTH, add_horizontal_scroll
from responsive_merge.merge.style_merger import merge_styles
from responsive_merge.models import Element, MergeConfig


def carousel(container_tokens, child_tokens, count):
    return Element(tag="div", identity="Carousel", tokens=container_tokens, children=[
        Element(tag="div", identity=f"Card{i}", tokens=child_tokens) for i in range(count)
    ])


def run(count, narrow_container="flex gap-4", narrow_child="w-[280px] shrink-0", **config):
    wide = carousel("flex gap-4", "w-1/3", count)
    narrow = carousel(narrow_container, narrow_child, count)
    context = MergeContext(wide, wide.model_copy(deep=True), narrow, MergeConfig(**config))
    match_elements(context)
    merge_styles(context)
    stats = add_horizontal_scroll(context)
    return context, stats


def test_two_fixed_children_promote_container():
    context, stats = run(2)
    assert "max-md:overflow-x-auto" in context.merged_tree.tokens
    assert stats["containers_annotated"] == 1
    assert stats["annotated"] == ["Carousel"]
    assert context.custom_rules["max-md:overflow-x-auto"].declarations == {"overflow-x": "auto"}


def test_single_fixed_child_is_only_a_candidate():
    context, stats = run(1)
    assert "max-md:overflow-x-auto" not in context.merged_tree.tokens
    assert stats["candidates"] == 1
    assert stats["containers_annotated"] == 0


def test_shrinkable_children_do_not_count():
    context, stats = run(3, narrow_child="w-[280px]")
    assert stats["candidates"] == 0
    assert "max-md:overflow-x-auto" not in context.merged_tree.tokens


def test_vertical_container_is_not_annotated():
    context, stats = run(2, narrow_container="flex flex-col gap-4")
    assert stats["containers_annotated"] == 0


def test_existing_overflow_is_respected():
    context, stats = run(2, narrow_container="flex gap-4 overflow-x-scroll")
    assert stats["containers_annotated"] == 0
    assert "max-md:overflow-x-auto" not in context.merged_tree.tokens


def test_threshold_is_configurable():
    context, stats = run(2, overflow_min_children=3)
    assert stats["containers_annotated"] == 0


def test_fixed_width_pattern():
    for token in ("w-[280px]", "w-[12.5px]", "w-64", "w-px", "w-custom-card"):
        assert FIXED_WIDTH.match(token), token
    for token in ("w-full", "w-1/2", "w-auto", "w-screen"):
        assert not FIXED_WIDTH.match(token), token


def run_variants(wide_container, medium_container, narrow_container):
    wide = carousel(wide_container, "w-1/3", 2)
    medium = carousel(medium_container, "w-1/3", 2)
    narrow = carousel(narrow_container, "w-[280px] shrink-0", 2)
    context = MergeContext(wide, medium, narrow, MergeConfig())
    match_elements(context)
    merge_styles(context)
    stats = add_horizontal_scroll(context)
    return context, stats


def test_wide_overflow_reset_at_medium_is_annotated():
    context, stats = run_variants("flex overflow-x-auto", "flex", "flex")
    assert context.merged_tree.tokens == [
        "flex", "overflow-x-auto", "max-lg:overflow-x-visible", "max-md:overflow-x-auto",
    ]
    assert stats["containers_annotated"] == 1


def test_scroll_token_replaces_narrow_overflow_reset():
    context, stats = run_variants("flex", "flex overflow-x-auto", "flex")
    assert context.merged_tree.tokens == ["flex", "max-lg:overflow-x-auto", "max-md:overflow-x-auto"]
    assert stats["containers_annotated"] == 1
    assert "max-md:overflow-x-visible" not in context.custom_rules
    assert "max-md:overflow-x-auto" in context.custom_rules


def test_overflow_shorthand_is_respected():
    context, stats = run(2, narrow_container="flex gap-4 overflow-hidden")
    assert stats["candidates"] == 1
    assert stats["containers_annotated"] == 0
