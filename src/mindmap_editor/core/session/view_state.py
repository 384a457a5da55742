"""Per-node presentation state that is never persisted."""

from mindmap_editor.core.tree.navigation import collect_ids, get_breadcrumbs
from mindmap_editor.models.node import Node


class ViewState:
    """Expanded and comments-open flags keyed by node id.

    Only the root starts expanded.
    """

    def __init__(self, root: Node) -> None:
        self._expanded: set[str] = {root.id}
        self._comments_open: set[str] = set()

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def toggle_expanded(self, node_id: str) -> bool:
        """Flip the expanded flag and return the new value."""
        if node_id in self._expanded:
            self._expanded.discard(node_id)
            return False
        self._expanded.add(node_id)
        return True

    def reveal(self, root: Node, node_id: str) -> None:
        """Expand every ancestor of ``node_id`` so it becomes visible."""
        self._expanded.update(crumb.node_id for crumb in get_breadcrumbs(root, node_id))

    def comments_open(self, node_id: str) -> bool:
        return node_id in self._comments_open

    def toggle_comments(self, node_id: str) -> bool:
        if node_id in self._comments_open:
            self._comments_open.discard(node_id)
            return False
        self._comments_open.add(node_id)
        return True

    def prune(self, root: Node) -> None:
        """Forget flags for nodes that no longer exist."""
        live = set(collect_ids(root))
        self._expanded &= live
        self._comments_open &= live
