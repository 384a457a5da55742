"""Drag-to-reparent interaction sessions."""

from dataclasses import dataclass

from loguru import logger

from mindmap_editor.core.tree.mutation import move_rejection, reparent
from mindmap_editor.core.tree.navigation import locate
from mindmap_editor.models.node import Node


@dataclass(frozen=True)
class DropOutcome:
    """Result of releasing a drag over a target node."""

    root: Node
    moved: bool
    rejection: str | None = None


class DragSession:
    """Carries a dragged node id from pointer-down to drop.

    Nothing in the tree changes until a successful drop, so aborting never has
    anything to roll back.
    """

    def __init__(self) -> None:
        self.payload: str | None = None
        self.hover_target: str | None = None

    @property
    def active(self) -> bool:
        return self.payload is not None

    def start(self, root: Node, node_id: str) -> bool:
        """Begin dragging ``node_id``. The root and unknown ids refuse to be dragged."""
        if node_id == root.id:
            logger.debug("Refusing to drag the root topic")
            return False
        if locate(root, node_id) is None:
            logger.debug("Refusing to drag unknown node {}", node_id)
            return False
        self.payload = node_id
        self.hover_target = None
        return True

    def hover(self, target_id: str) -> None:
        """Mark ``target_id`` as the drop-accepting candidate (view only)."""
        if self.active:
            self.hover_target = target_id

    def leave(self, target_id: str) -> None:
        if self.hover_target == target_id:
            self.hover_target = None

    def abort(self) -> None:
        self.payload = None
        self.hover_target = None

    def drop(self, root: Node, target_id: str) -> DropOutcome:
        """Release over ``target_id`` and reparent the carried node there."""
        source_id = self.payload
        self.abort()
        if source_id is None or source_id == target_id:
            return DropOutcome(root=root, moved=False)

        reason = move_rejection(root, source_id, target_id)
        if reason is not None:
            logger.warning("Drop of {} on {} rejected: {}", source_id, target_id, reason)
            return DropOutcome(root=root, moved=False, rejection=reason)

        new_root = reparent(root, source_id, target_id)
        return DropOutcome(root=new_root, moved=new_root is not root)
