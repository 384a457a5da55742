"""Immutable tree updates.

Every function takes the current root and returns a new root. Inputs are never
modified: the path from the root to the changed node is copied and every other
subtree is shared with the input. Unknown ids are silent no-ops that return the
input unchanged.
"""

from collections.abc import Callable
from dataclasses import replace
from typing import Any, Literal

from loguru import logger

from mindmap_editor.config import DEFAULT_NODE_LABEL
from mindmap_editor.core.tree.navigation import is_descendant, locate
from mindmap_editor.models.node import Node, new_id

Direction = Literal["previous", "next"]

ROOT_MOVE_REJECTED = "The root topic cannot be moved."
CYCLE_MOVE_REJECTED = "A topic cannot be moved inside itself or one of its descendants."
ROOT_DELETE_REJECTED = "The root topic cannot be deleted."


def _update(node: Node, node_id: str, fn: Callable[[Node], Node]) -> Node:
    """Apply ``fn`` to the node with ``node_id``, copying only the path to it."""
    if node.id == node_id:
        return fn(node)
    new_children = []
    changed = False
    for child in node.children:
        new_child = _update(child, node_id, fn)
        changed = changed or new_child is not child
        new_children.append(new_child)
    if not changed:
        return node
    return replace(node, children=tuple(new_children))


def patch_node(root: Node, node_id: str, **changes: Any) -> Node:
    """Merge ``changes`` into the node with ``node_id``.

    Passing ``image=None`` or ``color=None`` clears the field.
    """
    if "id" in changes:
        msg = "Node ids are immutable"
        raise ValueError(msg)
    if locate(root, node_id) is None:
        logger.debug("patch: node {} not found, ignoring", node_id)
        return root
    return _update(root, node_id, lambda n: replace(n, **changes))


def make_node(label: str = DEFAULT_NODE_LABEL, *, node_id: str | None = None) -> Node:
    """Create a fresh node with no children, color, comments or image."""
    return Node(id=node_id or new_id(), label=label)


def attach_node(root: Node, parent_id: str, node: Node) -> Node:
    """Append ``node`` (with its subtree) as the last child of ``parent_id``."""
    if locate(root, parent_id) is None:
        logger.debug("attach: parent {} not found, ignoring", parent_id)
        return root
    return _update(root, parent_id, lambda p: replace(p, children=(*p.children, node)))


def insert_child(
    root: Node,
    parent_id: str,
    *,
    label: str = DEFAULT_NODE_LABEL,
    child_id: str | None = None,
) -> Node:
    """Append a new default child under ``parent_id``."""
    return attach_node(root, parent_id, make_node(label, node_id=child_id))


def delete_subtree(root: Node, node_id: str) -> Node | None:
    """Remove ``node_id`` and all of its descendants.

    Returns None when ``node_id`` is the root passed in; callers must refuse to
    delete the document root before getting here.
    """
    if root.id == node_id:
        return None

    def remove(node: Node) -> Node:
        kept = tuple(c for c in node.children if c.id != node_id)
        if len(kept) != len(node.children):
            return replace(node, children=kept)
        new_children = tuple(remove(c) for c in node.children)
        if all(a is b for a, b in zip(new_children, node.children, strict=True)):
            return node
        return replace(node, children=new_children)

    return remove(root)


def reorder_sibling(root: Node, node_id: str, direction: Direction) -> Node:
    """Swap ``node_id`` with its previous or next sibling.

    At either end of the sibling list this is a no-op.
    """

    def swap(parent: Node) -> Node:
        idx = next(i for i, c in enumerate(parent.children) if c.id == node_id)
        target = idx - 1 if direction == "previous" else idx + 1
        if not 0 <= target < len(parent.children):
            return parent
        children = list(parent.children)
        children[idx], children[target] = children[target], children[idx]
        return replace(parent, children=tuple(children))

    def visit(node: Node) -> Node:
        if any(c.id == node_id for c in node.children):
            return swap(node)
        new_children = tuple(visit(c) for c in node.children)
        if all(a is b for a, b in zip(new_children, node.children, strict=True)):
            return node
        return replace(node, children=new_children)

    return visit(root)


def move_rejection(root: Node, source_id: str, target_id: str) -> str | None:
    """Return why moving ``source_id`` under ``target_id`` is forbidden, if it is."""
    if source_id == root.id:
        return ROOT_MOVE_REJECTED
    if source_id != target_id and is_descendant(root, source_id, target_id):
        return CYCLE_MOVE_REJECTED
    return None


def reparent(root: Node, source_id: str, target_id: str) -> Node:
    """Move ``source_id`` (with its subtree) to be the last child of ``target_id``.

    Moving the root, moving a node onto itself and moving a node below one of its
    own descendants all return ``root`` unchanged.
    """
    if source_id == target_id:
        return root
    reason = move_rejection(root, source_id, target_id)
    if reason is not None:
        logger.warning("Move of {} under {} rejected: {}", source_id, target_id, reason)
        return root

    source = locate(root, source_id)
    if source is None:
        logger.debug("reparent: source {} not found, ignoring", source_id)
        return root

    without_source = delete_subtree(root, source_id)
    if without_source is None or locate(without_source, target_id) is None:
        logger.debug("reparent: target {} not found, ignoring", target_id)
        return root
    return attach_node(without_source, target_id, source)
