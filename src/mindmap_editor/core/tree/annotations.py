"""Sticky-note annotations on nodes.

The whole comment sequence is read, rebuilt and written back through
``patch_node``. New annotations are appended; edits keep position, id and
creation time.
"""

from dataclasses import replace

from loguru import logger

from mindmap_editor.core.tree.mutation import patch_node
from mindmap_editor.core.tree.navigation import locate
from mindmap_editor.core.tree.palette import DEFAULT_POSTIT_COLOR
from mindmap_editor.models.node import Annotation, Node, new_id, utc_now_iso


def get_comments(root: Node, node_id: str) -> tuple[Annotation, ...]:
    node = locate(root, node_id)
    if node is None or node.comments is None:
        return ()
    return node.comments


def add_comment(
    root: Node,
    node_id: str,
    content: str,
    *,
    background_color: str = DEFAULT_POSTIT_COLOR,
    comment_id: str | None = None,
) -> Node:
    """Append a new annotation to ``node_id``."""
    if locate(root, node_id) is None:
        logger.debug("add_comment: node {} not found, ignoring", node_id)
        return root
    comment = Annotation(
        id=comment_id or new_id(),
        content=content,
        background_color=background_color,
        created_at=utc_now_iso(),
    )
    return patch_node(root, node_id, comments=(*get_comments(root, node_id), comment))


def edit_comment(
    root: Node,
    node_id: str,
    comment_id: str,
    *,
    content: str | None = None,
    background_color: str | None = None,
) -> Node:
    """Replace the content and/or background color of an existing annotation."""
    comments = get_comments(root, node_id)
    if not any(c.id == comment_id for c in comments):
        logger.debug("edit_comment: {} not found on node {}, ignoring", comment_id, node_id)
        return root

    def edited(comment: Annotation) -> Annotation:
        if comment.id != comment_id:
            return comment
        return replace(
            comment,
            content=comment.content if content is None else content,
            background_color=(
                comment.background_color if background_color is None else background_color
            ),
        )

    return patch_node(root, node_id, comments=tuple(edited(c) for c in comments))


def delete_comment(root: Node, node_id: str, comment_id: str) -> Node:
    comments = get_comments(root, node_id)
    kept = tuple(c for c in comments if c.id != comment_id)
    if len(kept) == len(comments):
        logger.debug("delete_comment: {} not found on node {}, ignoring", comment_id, node_id)
        return root
    return patch_node(root, node_id, comments=kept)
