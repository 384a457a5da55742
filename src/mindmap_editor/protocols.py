"""Protocols for the collaborators the editor talks to."""

from typing import Any, Protocol, runtime_checkable

from mindmap_editor.models.node import Flashcard, Node


@runtime_checkable
class EditSurfaceProtocol(Protocol):
    """A rich-text edit surface bound to the selected node's label.

    Selection ranges are opaque values owned by the surface.
    """

    def get_content(self) -> str:
        """Return the current markup in the surface."""
        ...

    def set_content(self, content: str) -> None:
        """Replace the surface markup (resets the caret)."""
        ...

    def focus(self) -> None:
        """Give input focus to the surface."""
        ...

    def get_selection(self) -> Any | None:
        """Return the current selection range, or None if there is none."""
        ...

    def set_selection(self, selection: Any) -> None:
        """Re-apply a previously captured selection range."""
        ...

    def exec_command(self, command: str, value: str | None = None) -> None:
        """Run a formatting command at the current selection."""
        ...


@runtime_checkable
class BlobStorageProtocol(Protocol):
    """Protocol for blob storage clients."""

    def upload(self, data: bytes, filename: str, *, folder: str) -> str:
        """Store a payload and return a retrievable URL."""
        ...


@runtime_checkable
class TreeGeneratorProtocol(Protocol):
    """Protocol for generative content clients."""

    def generate_tree(self, files: list[Any]) -> Node:
        """Generate a normalized mind map tree from file payloads."""
        ...

    def generate_flashcards(self, file: Any) -> list[Flashcard]:
        """Generate question/answer pairs from a file payload."""
        ...
