"""
Tests for missing-element detection and visibility injection.
"""

import pytest

from responsive_merge.merge.context import MergeContext
from responsive_merge.merge.matcher import IDENTITY_NOT_FOUND, match_elements
from responsive_merge.merge.style_merger import merge_styles
from responsive_merge.merge.tree_index import TreeIndex
from responsive_merge.merge.visibility import detect_missing_elements, inject_visibility
from responsive_merge.models import Element, MergeConfig, Variant


def sidebar():
    return Element(tag="aside", identity="Sidebar", tokens="flex flex-col", children=[
        Element(tag="a", identity="SidebarLink", tokens="block"),
    ])


@pytest.fixture
def context():
    wide = Element(tag="div", identity="Page", tokens="flex", children=[
        sidebar(),
        Element(tag="div", identity="Promo", tokens="block"),
        Element(tag="footer", identity="Footer", tokens="block"),
    ])
    medium = Element(tag="div", identity="Page", tokens="flex", children=[
        Element(tag="div", identity="Promo", tokens="block"),
    ])
    narrow = Element(tag="div", identity="Page", tokens="flex", children=[
        sidebar(),
        Element(tag="nav", identity="MobileMenu", tokens="block"),
    ])
    context = MergeContext(wide, medium, narrow, MergeConfig())
    match_elements(context)
    return context


def tokens_of(context, identity):
    return TreeIndex(context.merged_tree).find_identity(identity).element.tokens


def test_detect_missing_elements(context):
    stats = detect_missing_elements(context)

    assert [e.element_key for e in context.unmatched["medium"]] == ["Sidebar", "SidebarLink", "Footer"]
    assert [e.element_key for e in context.unmatched["narrow"]] == ["Promo", "Footer"]
    assert context.unmatched["medium"][0].reason == IDENTITY_NOT_FOUND
    assert context.unmatched["medium"][0].variant == Variant.MEDIUM
    assert context.extra_identities["narrow"] == ["MobileMenu"]
    assert context.extra_identities["medium"] == []
    assert stats["missing_medium"] == 3
    assert context.stats.missing_elements == 5
    assert context.stats.extra_identities == 1


def test_inject_visibility(context):
    merge_styles(context)
    stats = inject_visibility(context)

    # Hidden at medium, shown again at narrow with its own display
    assert tokens_of(context, "Sidebar") == ["flex", "flex-col", "max-lg:hidden", "max-md:flex"]
    # Descendant of a hidden element is left alone
    assert tokens_of(context, "SidebarLink") == ["block"]
    # Missing only at narrow
    assert tokens_of(context, "Promo") == ["block", "max-md:hidden"]
    # Missing at both: the medium token cascades
    assert tokens_of(context, "Footer") == ["block", "max-lg:hidden"]

    assert stats["hidden_medium"] == 2
    assert stats["hidden_narrow"] == 1
    assert stats["reshown_narrow"] == 1
    assert context.stats.visibility_tokens_injected == 4
    assert context.custom_rules["max-lg:hidden"].declarations == {"display": "none"}
    assert context.custom_rules["max-md:flex"].media_query == "(max-width: 768px)"


def test_elements_without_identity_are_not_hidden():
    wide = Element(tag="div", children=[Element(tag="p", tokens="text-sm")])
    medium = Element(tag="div")
    context = MergeContext(wide, medium, medium.model_copy(deep=True), MergeConfig())
    match_elements(context)

    stats = inject_visibility(context)

    assert stats["visibility_tokens_injected"] == 0
    assert context.merged_tree.children[0].tokens == ["text-sm"]
