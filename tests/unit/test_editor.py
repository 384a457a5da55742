"""Tests for the editing session controller."""

from unittest.mock import patch

from mindmap_editor.core.session import editor
from mindmap_editor.core.session.editor import Editing, EditingSession, Idle
from mindmap_editor.core.tree.mutation import ROOT_DELETE_REJECTED, delete_subtree, patch_node
from mindmap_editor.core.tree.navigation import locate
from mindmap_editor.models.node import Node
from tests.unit.fakes import FakeEditSurface


def _label(session: EditingSession, node_id: str) -> str:
    node = locate(session.root, node_id)
    assert node is not None
    return node.label


def test_starts_idle(tree: Node) -> None:
    session = EditingSession(tree, FakeEditSurface())
    assert session.state == Idle()
    assert session.selected_id is None


def test_select_projects_label_once(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A1")
    assert session.state == Editing("A1")
    assert surface.set_content_calls == ["Alpha one"]


def test_three_edits_make_three_patches_and_no_reprojection(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A1")

    with patch.object(editor, "patch_node", wraps=patch_node) as spy:
        for text in ("A", "Al", "Alp"):
            surface.type(text)
            session.handle_input()
        assert spy.call_count == 3
        assert _label(session, "A1") == "Alp"
        assert surface.set_content_calls == ["Alpha one"]

        session.select("B")
        assert spy.call_count == 3

    assert surface.set_content_calls == ["Alpha one", "Beta"]
    assert _label(session, "A1") == "Alp"


def test_reselecting_same_node_does_not_reproject(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A")
    surface.type("Alpha!")
    session.handle_input()
    session.select("A")
    assert surface.set_content_calls == ["Alpha"]
    assert surface.content == "Alpha!"


def test_select_unknown_node_keeps_state(tree: Node) -> None:
    session = EditingSession(tree, FakeEditSurface())
    session.select("missing")
    assert session.state == Idle()


def test_input_while_idle_is_ignored(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    surface.type("stray")
    session.handle_input()
    assert session.root is tree


def test_color_command_restores_saved_range(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A")
    surface.selection = "caret@3"

    session.save_selection()
    surface.steal_focus()
    session.exec_command("foreColor", "#ff0000")

    assert surface.commands == [("foreColor", "#ff0000", "caret@3")]
    assert surface.focused
    assert _label(session, "A") == '<font color="#ff0000">Alpha</font>'


def test_plain_command_does_not_restore_range(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A")
    surface.selection = "caret@3"
    session.handle_blur()
    surface.selection = "caret@5"

    session.exec_command("bold")

    assert surface.commands == [("bold", None, "caret@5")]
    assert _label(session, "A") == "<b>Alpha</b>"


def test_insert_html_restores_range_and_syncs(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("B")
    surface.selection = "caret@end"
    session.save_selection()
    surface.steal_focus()

    session.insert_html("⭐")

    assert surface.commands == [("insertHTML", "⭐", "caret@end")]
    assert _label(session, "B") == "Beta⭐"


def test_blur_without_selection_keeps_previous_snapshot(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A")
    surface.selection = "caret@1"
    session.handle_blur()
    surface.selection = None
    session.handle_blur()
    assert session.saved_range == "caret@1"


def test_changing_selection_clears_saved_range(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A")
    surface.selection = "caret@1"
    session.save_selection()
    session.select("B")
    assert session.saved_range is None


def test_commands_while_idle_do_nothing(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.exec_command("bold")
    session.insert_html("x")
    assert surface.commands == []


def test_deleting_selected_node_returns_to_idle(tree: Node) -> None:
    session = EditingSession(tree, FakeEditSurface())
    session.select("A")
    assert session.delete_selected() is None
    assert session.state == Idle()
    assert locate(session.root, "A") is None
    assert locate(session.root, "A1") is None


def test_deleting_root_is_refused(tree: Node) -> None:
    session = EditingSession(tree, FakeEditSurface())
    session.select("R")
    assert session.delete_selected() == ROOT_DELETE_REJECTED
    assert session.root is tree
    assert session.state == Editing("R")


def test_replace_tree_without_selected_node_goes_idle(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("A1")
    without_a = delete_subtree(tree, "A")
    assert without_a is not None
    session.replace_tree(without_a)
    assert session.state == Idle()
    assert surface.set_content_calls == ["Alpha one"]


def test_replace_tree_keeps_selection_when_node_survives(tree: Node) -> None:
    surface = FakeEditSurface()
    session = EditingSession(tree, surface)
    session.select("B")
    session.replace_tree(patch_node(tree, "B", label="Renamed elsewhere"))
    assert session.state == Editing("B")
    assert surface.set_content_calls == ["Beta"]


def test_add_child_and_reorder_selected(tree: Node) -> None:
    session = EditingSession(tree, FakeEditSurface())
    session.select("R")
    child_id = session.add_child()
    assert child_id is not None
    assert [c.id for c in session.root.children] == ["A", "B", child_id]

    session.select("B")
    session.reorder("previous")
    assert [c.id for c in session.root.children] == ["B", "A", child_id]


def test_reorder_root_is_ignored(tree: Node) -> None:
    session = EditingSession(tree, FakeEditSurface())
    session.select("R")
    session.reorder("next")
    assert session.root is tree


def test_set_color_and_comments_on_selected(tree: Node) -> None:
    session = EditingSession(tree, FakeEditSurface())
    session.add_comment("ignored while idle")
    assert session.root is tree

    session.select("B")
    session.set_color("green")
    session.add_comment("remember this", "#dcfce7")
    node = locate(session.root, "B")
    assert node is not None
    assert node.color == "green"
    assert node.comments is not None and len(node.comments) == 1

    comment_id = node.comments[0].id
    session.edit_comment("B", comment_id, "updated")
    session.delete_comment("A", comment_id)
    node = locate(session.root, "B")
    assert node is not None and node.comments is not None
    assert [c.content for c in node.comments] == ["updated"]

    session.delete_comment("B", comment_id)
    node = locate(session.root, "B")
    assert node is not None
    assert node.comments == ()
