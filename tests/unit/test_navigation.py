"""Tests for tree navigation (lookup, breadcrumbs, siblings)."""

from mindmap_editor.core.tree.navigation import (
    collect_ids,
    find_parent,
    get_breadcrumbs,
    get_siblings,
    is_descendant,
    iter_nodes,
    locate,
)
from mindmap_editor.models.node import Breadcrumb, Node


def test_locate_finds_nested_node(tree: Node) -> None:
    found = locate(tree, "A1")
    assert found is not None
    assert found.label == "Alpha one"


def test_locate_missing_returns_none(tree: Node) -> None:
    assert locate(tree, "nope") is None


def test_find_parent(tree: Node) -> None:
    parent = find_parent(tree, "A1")
    assert parent is not None
    assert parent.id == "A"
    assert find_parent(tree, "R") is None


def test_iter_nodes_is_preorder_with_depth(tree: Node) -> None:
    assert [(n.id, d) for n, d in iter_nodes(tree)] == [
        ("R", 0),
        ("A", 1),
        ("A1", 2),
        ("B", 1),
    ]
    assert collect_ids(tree) == ["R", "A", "A1", "B"]


def test_is_descendant(tree: Node) -> None:
    assert is_descendant(tree, "A", "A1")
    assert is_descendant(tree, "A", "A")
    assert is_descendant(tree, "R", "B")
    assert not is_descendant(tree, "A", "B")
    assert not is_descendant(tree, "A1", "A")
    assert not is_descendant(tree, "missing", "A")


def test_breadcrumbs_for_nested_node(tree: Node) -> None:
    """A1 sits under R > A; breadcrumbs exclude the node itself."""
    assert get_breadcrumbs(tree, "A1") == (
        Breadcrumb(node_id="R", label="Root", depth=0),
        Breadcrumb(node_id="A", label="Alpha", depth=1),
    )
    assert get_breadcrumbs(tree, "R") == ()
    assert get_breadcrumbs(tree, "missing") == ()


def test_siblings_of_first_child(tree: Node) -> None:
    before, after = get_siblings(tree, "A")
    assert before == ()
    assert [n.id for n in after] == ["B"]


def test_root_has_no_siblings(tree: Node) -> None:
    assert get_siblings(tree, "R") == ((), ())
