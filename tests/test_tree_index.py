"""
Tests for the tree arena index.
"""

import pytest

from responsive_merge.merge.tree_index import ROOT_ANCHOR, TreeIndex
from responsive_merge.models import Element


@pytest.fixture
def tree():
    return Element(tag="main", identity="Page", children=[
        Element(tag="section", identity="Card", children=[
            Element(tag="div", children=[Element(tag="span")]),
            Element(tag="p"),
        ]),
        Element(tag="footer"),
    ])


def test_positions_are_preorder(tree):
    index = TreeIndex(tree)
    assert len(index) == 6
    assert [node.element.tag for node in index] == ["main", "section", "div", "span", "p", "footer"]


def test_path_keys_anchor_at_nearest_identity(tree):
    index = TreeIndex(tree)
    keys = [node.key for node in index]
    assert keys == ["Page", "Card", "Card>[0]", "Card>[0]>[0]", "Card>[1]", "Page>[1]"]


def test_root_without_identity_uses_root_anchor():
    index = TreeIndex(Element(tag="div", children=[Element(tag="p"), Element(tag="p")]))
    assert index.node(0).key == ROOT_ANCHOR
    assert index.node(2).path_key == f"{ROOT_ANCHOR}>[1]"


def test_parent_links_and_ancestors(tree):
    index = TreeIndex(tree)
    span = index.find_path("Card>[0]>[0]")
    assert span.depth == 3
    assert [node.key for node in index.ancestors(span.position)] == ["Card>[0]", "Card", "Page"]
    assert index.parent_of(0) is None
    assert [node.key for node in index.children_of(1)] == ["Card>[0]", "Card>[1]"]


def test_identity_lookup_keeps_first_occurrence():
    root = Element(tag="div", children=[
        Element(tag="p", identity="Item"),
        Element(tag="p", identity="Item"),
    ])
    index = TreeIndex(root)
    assert index.find_identity("Item").position == 1
    assert index.identities() == ["Item"]
    assert index.find_identity("Missing") is None


def test_position_of_element_object(tree):
    index = TreeIndex(tree)
    footer = tree.children[1]
    assert index.position_of(footer) == 5
    assert index.position_of(Element(tag="footer")) is None
