"""Tree navigation: lookup, breadcrumbs, siblings, traversal."""

from collections.abc import Iterator

from mindmap_editor.models.node import Breadcrumb, Node


def locate(root: Node, node_id: str) -> Node | None:
    """Depth-first search for ``node_id``. Returns None when absent."""
    if root.id == node_id:
        return root
    for child in root.children:
        found = locate(child, node_id)
        if found is not None:
            return found
    return None


def find_parent(root: Node, node_id: str) -> Node | None:
    """Return the parent of ``node_id``, or None for the root or a missing id."""
    for child in root.children:
        if child.id == node_id:
            return root
        found = find_parent(child, node_id)
        if found is not None:
            return found
    return None


def iter_nodes(root: Node, depth: int = 0) -> Iterator[tuple[Node, int]]:
    """Yield ``(node, depth)`` pairs in pre-order."""
    yield root, depth
    for child in root.children:
        yield from iter_nodes(child, depth + 1)


def collect_ids(root: Node) -> list[str]:
    return [node.id for node, _depth in iter_nodes(root)]


def is_descendant(root: Node, ancestor_id: str, candidate_id: str) -> bool:
    """True if ``candidate_id`` is ``ancestor_id`` itself or lies anywhere below it."""
    if ancestor_id == candidate_id:
        return True
    ancestor = locate(root, ancestor_id)
    if ancestor is None:
        return False
    return locate(ancestor, candidate_id) is not None


def get_breadcrumbs(root: Node, node_id: str) -> tuple[Breadcrumb, ...]:
    """Get ancestor breadcrumbs for a node.

    Returns breadcrumbs in order from root to immediate parent (excludes the node itself).
    """

    def walk(node: Node, depth: int, trail: list[Breadcrumb]) -> tuple[Breadcrumb, ...] | None:
        if node.id == node_id:
            return tuple(trail)
        trail.append(Breadcrumb(node_id=node.id, label=node.label, depth=depth))
        for child in node.children:
            found = walk(child, depth + 1, trail)
            if found is not None:
                return found
        trail.pop()
        return None

    return walk(root, 0, []) or ()


def get_siblings(
    root: Node,
    node_id: str,
    *,
    count: int = 3,
) -> tuple[tuple[Node, ...], tuple[Node, ...]]:
    """Get siblings before and after a node.

    Returns (siblings_before, siblings_after) tuples.
    """
    parent = find_parent(root, node_id)
    if parent is None:
        return (), ()
    idx = next(i for i, c in enumerate(parent.children) if c.id == node_id)
    before = parent.children[max(0, idx - count) : idx]
    after = parent.children[idx + 1 : idx + 1 + count]
    return before, after
