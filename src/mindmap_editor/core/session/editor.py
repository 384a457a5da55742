"""Editing session: the selected node, its edit surface and the tree.

The surface is filled from a node's label only when that node is entered
(``select``). Input events flow the other way, from the surface into the tree,
and never re-project into the surface. Keeping those two triggers separate is
what stops the write-label / reset-caret / input-event loop.
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger

from mindmap_editor.core.tree import annotations
from mindmap_editor.core.tree.mutation import (
    ROOT_DELETE_REJECTED,
    Direction,
    delete_subtree,
    insert_child,
    patch_node,
    reorder_sibling,
)
from mindmap_editor.core.tree.navigation import locate
from mindmap_editor.core.tree.palette import DEFAULT_POSTIT_COLOR
from mindmap_editor.models.node import Node, new_id
from mindmap_editor.protocols import EditSurfaceProtocol

# Commands whose controls take focus away from the surface (color choosers).
RANGE_RESTORING_COMMANDS = frozenset({"foreColor", "hiliteColor"})
INSERT_HTML = "insertHTML"


@dataclass(frozen=True)
class Idle:
    """No node is selected."""


@dataclass(frozen=True)
class Editing:
    """``node_id`` is selected and projected into the edit surface."""

    node_id: str


SessionState = Idle | Editing


class EditingSession:
    """Owns the selection and keeps the edit surface and tree consistent."""

    def __init__(self, root: Node, surface: EditSurfaceProtocol) -> None:
        self._root = root
        self.surface = surface
        self._state: SessionState = Idle()
        self._saved_range: Any | None = None

    @property
    def root(self) -> Node:
        return self._root

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def selected_id(self) -> str | None:
        return self._state.node_id if isinstance(self._state, Editing) else None

    @property
    def saved_range(self) -> Any | None:
        return self._saved_range

    # --- selection ---

    def select(self, node_id: str) -> None:
        """Enter ``Editing(node_id)``; the surface is initialized once, here."""
        self._saved_range = None
        node = locate(self._root, node_id)
        if node is None:
            logger.debug("select: node {} not found, ignoring", node_id)
            return
        if self.selected_id == node_id:
            return
        self._state = Editing(node_id)
        self.surface.set_content(node.label)

    def deselect(self) -> None:
        self._state = Idle()
        self._saved_range = None

    def replace_tree(self, root: Node) -> None:
        """Adopt a tree changed elsewhere. Drops the selection if its node is gone."""
        self._root = root
        selected = self.selected_id
        if selected is not None and locate(root, selected) is None:
            logger.debug("Selected node {} no longer exists, leaving edit mode", selected)
            self.deselect()

    # --- surface events ---

    def handle_input(self) -> None:
        """Copy the surface content into the selected node's label."""
        self._sync_label()

    def handle_blur(self) -> None:
        self.save_selection()

    def save_selection(self) -> None:
        """Snapshot the caret before a control steals focus from the surface."""
        selection = self.surface.get_selection()
        if selection is not None:
            self._saved_range = selection

    def restore_selection(self) -> None:
        self.surface.focus()
        if self._saved_range is not None:
            self.surface.set_selection(self._saved_range)

    def exec_command(self, command: str, value: str | None = None) -> None:
        """Apply a formatting command and write the result back to the label."""
        if self.selected_id is None:
            return
        if command in RANGE_RESTORING_COMMANDS:
            self.restore_selection()
        else:
            self.surface.focus()
        self.surface.exec_command(command, value)
        self._sync_label()

    def insert_html(self, markup: str) -> None:
        """Insert a symbol or snippet where the caret was last seen."""
        if self.selected_id is None:
            return
        self.restore_selection()
        self.surface.exec_command(INSERT_HTML, markup)
        self._sync_label()

    def _sync_label(self) -> None:
        node_id = self.selected_id
        if node_id is None:
            return
        self._root = patch_node(self._root, node_id, label=self.surface.get_content())

    # --- actions on the selected node ---

    def add_child(self) -> str | None:
        """Add a child under the selected node and return its id."""
        node_id = self.selected_id
        if node_id is None:
            return None
        child_id = new_id()
        self._root = insert_child(self._root, node_id, child_id=child_id)
        return child_id

    def delete_selected(self) -> str | None:
        """Delete the selected subtree. Returns a rejection message for the root."""
        node_id = self.selected_id
        if node_id is None:
            return None
        if node_id == self._root.id:
            logger.warning(ROOT_DELETE_REJECTED)
            return ROOT_DELETE_REJECTED
        new_root = delete_subtree(self._root, node_id)
        if new_root is not None:
            self._root = new_root
        self.deselect()
        return None

    def set_color(self, color: str | None) -> None:
        if self.selected_id is not None:
            self._root = patch_node(self._root, self.selected_id, color=color)

    def reorder(self, direction: Direction) -> None:
        node_id = self.selected_id
        if node_id is None or node_id == self._root.id:
            return
        self._root = reorder_sibling(self._root, node_id, direction)

    def add_comment(self, content: str, background_color: str = DEFAULT_POSTIT_COLOR) -> None:
        if self.selected_id is not None:
            self._root = annotations.add_comment(
                self._root, self.selected_id, content, background_color=background_color
            )

    def edit_comment(
        self,
        node_id: str,
        comment_id: str,
        content: str,
        background_color: str | None = None,
    ) -> None:
        self._root = annotations.edit_comment(
            self._root, node_id, comment_id, content=content, background_color=background_color
        )

    def delete_comment(self, node_id: str, comment_id: str) -> None:
        self._root = annotations.delete_comment(self._root, node_id, comment_id)
