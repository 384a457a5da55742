"""Fake implementations for testing the editor and its collaborators."""

from typing import Any

from mindmap_editor.errors import UploadError
from mindmap_editor.models.node import Flashcard, Node


class FakeEditSurface:
    """In-memory fake for a rich-text edit surface.

    Records every projection and command so tests can check what the session did.
    """

    def __init__(self) -> None:
        self.content = ""
        self.selection: Any | None = None
        self.focused = False
        self.set_content_calls: list[str] = []
        self.commands: list[tuple[str, str | None, Any | None]] = []

    def get_content(self) -> str:
        return self.content

    def set_content(self, content: str) -> None:
        self.set_content_calls.append(content)
        self.content = content
        self.selection = None

    def focus(self) -> None:
        self.focused = True

    def get_selection(self) -> Any | None:
        return self.selection

    def set_selection(self, selection: Any) -> None:
        self.selection = selection

    def exec_command(self, command: str, value: str | None = None) -> None:
        """Record the command with the selection active at the time, then apply it."""
        self.commands.append((command, value, self.selection))
        if command == "insertHTML":
            self.content += value or ""
        elif command == "bold":
            self.content = f"<b>{self.content}</b>"
        elif command == "foreColor":
            self.content = f'<font color="{value}">{self.content}</font>'

    # --- helpers for tests ---

    def type(self, text: str) -> None:
        """Simulate the user replacing the surface text."""
        self.content = text

    def steal_focus(self) -> None:
        """Simulate a control (e.g. a color chooser) taking focus and the caret."""
        self.focused = False
        self.selection = None


class FakeBlobStorage:
    """In-memory fake for BlobStorage."""

    def __init__(self, *, fail_with: UploadError | None = None) -> None:
        self.fail_with = fail_with
        self.uploads: list[tuple[bytes, str, str]] = []

    def upload(self, data: bytes, filename: str, *, folder: str) -> str:
        self.uploads.append((data, filename, folder))
        if self.fail_with is not None:
            raise self.fail_with
        return f"https://blobs.example/{folder}/{filename}"


class FakeTreeGenerator:
    """Returns a canned tree and records the payloads it was given."""

    def __init__(self, tree: Node | None = None, *, error: Exception | None = None) -> None:
        self.tree = tree
        self.error = error
        self.calls: list[list[Any]] = []

    def generate_tree(self, files: list[Any]) -> Node:
        self.calls.append(files)
        if self.error is not None:
            raise self.error
        assert self.tree is not None
        return self.tree

    def generate_flashcards(self, file: Any) -> list[Flashcard]:
        self.calls.append([file])
        if self.error is not None:
            raise self.error
        return [Flashcard(id="f1", question="Q?", answer="A.")]
