"""Shared test fixtures."""

from pathlib import Path

import pytest

from mindmap_editor.models.node import MindMap, Node
from mindmap_editor.store import MapStore


def make_tree() -> Node:
    """R -> [A -> [A1], B]"""
    return Node(
        id="R",
        label="Root",
        children=(
            Node(id="A", label="Alpha", children=(Node(id="A1", label="Alpha one"),)),
            Node(id="B", label="Beta"),
        ),
    )


@pytest.fixture
def tree() -> Node:
    return make_tree()


@pytest.fixture
def store(tmp_path: Path) -> MapStore:
    """Return a store over an empty temporary directory."""
    return MapStore(tmp_path)


@pytest.fixture
def stored_map(store: MapStore) -> MindMap:
    """Save the standard tree as map 'study' and return it."""
    mind_map = MindMap(id="study", name="Study Plan", root=make_tree(), created_at="2026-01-01")
    store.save(mind_map)
    return mind_map
