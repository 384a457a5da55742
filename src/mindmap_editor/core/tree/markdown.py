"""Render node subtrees as markdown."""

import html
import io
import re

from mindmap_editor.core.tree.navigation import locate
from mindmap_editor.models.node import Node

_TAG_RE = re.compile(r"<[^>]+>")
_BREAK_RE = re.compile(r"<br\s*/?>|</(?:div|p)>", re.IGNORECASE)


def strip_markup(text: str) -> str:
    """Turn edit-surface markup into plain text, keeping line breaks."""
    text = _BREAK_RE.sub("\n", text)
    return html.unescape(_TAG_RE.sub("", text)).strip()


def render_subtree_as_markdown(
    root: Node,
    *,
    node_id: str | None = None,
    max_depth: int | None = None,
    include_comments: bool = True,
) -> str:
    """Render a node and its descendants as indented markdown.

    Args:
        root: The document root.
        node_id: The node to start rendering from (None = whole document).
        max_depth: Max levels below the start node to include (None = unlimited).
        include_comments: Whether to include annotations as quote lines.

    Returns:
        Markdown string with bullet-list hierarchy, or "" if the node is unknown.
    """
    start = root if node_id is None else locate(root, node_id)
    if start is None:
        return ""

    out = io.StringIO()

    def write(node: Node, depth: int) -> None:
        indent = "    " * depth

        lines = strip_markup(node.label).split("\n")
        out.write(f"{indent}- {lines[0]}\n")
        for line in lines[1:]:
            out.write(f"{indent}  {line}\n")

        if node.image is not None:
            out.write(f"{indent}  ![image]({node.image.url})\n")

        if include_comments and node.comments:
            for comment in node.comments:
                for comment_line in strip_markup(comment.content).split("\n"):
                    out.write(f"{indent}  > {comment_line}\n")

        if max_depth is not None and depth == max_depth:
            # Truncation indicator when children are cut off by max_depth
            if node.children:
                child_count = len(node.children)
                noun = "child" if child_count == 1 else "children"
                out.write(f"{indent}    - ... ({child_count} more {noun}, id={node.id})\n")
            return

        for child in node.children:
            write(child, depth + 1)

    write(start, 0)
    return out.getvalue()
