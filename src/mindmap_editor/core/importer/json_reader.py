"""Convert mind map trees to and from JSON-compatible dicts."""

from typing import Any

from mindmap_editor.core.tree.attachments import clamp_scale
from mindmap_editor.models.node import (
    IMAGE_POSITIONS,
    Annotation,
    Attachment,
    MindMap,
    Node,
    new_id,
)

UNTITLED_LABEL = "Untitled"


def _parse_attachment(data: dict[str, Any]) -> Attachment:
    position = data.get("position", "top")
    if position not in IMAGE_POSITIONS:
        msg = f"Invalid image position {position!r}"
        raise ValueError(msg)
    scale = float(data.get("scale", 1.0))
    if not scale > 0:
        msg = f"Image scale must be positive, got {scale!r}"
        raise ValueError(msg)
    return Attachment(url=data["url"], position=position, scale=clamp_scale(scale))


def _parse_annotation(data: dict[str, Any]) -> Annotation:
    return Annotation(
        id=data["id"],
        content=data.get("content", ""),
        background_color=data.get("backgroundColor", ""),
        created_at=data.get("createdAt", ""),
    )


def parse_node(data: dict[str, Any]) -> Node:
    """Parse a persisted tree dict into a Node.

    Raises:
        ValueError: If the tree contains duplicate ids or a malformed image.
        KeyError: If a node has no id.
    """
    seen: set[str] = set()

    def parse(raw: dict[str, Any]) -> Node:
        node_id = raw["id"]
        if node_id in seen:
            msg = f"Duplicate node id: {node_id!r}"
            raise ValueError(msg)
        seen.add(node_id)

        comments = raw.get("comments")
        image = raw.get("image")
        return Node(
            id=node_id,
            label=raw.get("label", ""),
            children=tuple(parse(c) for c in raw.get("children") or []),
            color=raw.get("color"),
            comments=None if comments is None else tuple(_parse_annotation(c) for c in comments),
            image=None if image is None else _parse_attachment(image),
        )

    return parse(data)


def node_to_dict(node: Node) -> dict[str, Any]:
    """Serialize a Node. Absent optional fields are omitted, never nulled."""
    out: dict[str, Any] = {
        "id": node.id,
        "label": node.label,
        "children": [node_to_dict(c) for c in node.children],
    }
    if node.color is not None:
        out["color"] = node.color
    if node.comments is not None:
        out["comments"] = [
            {
                "id": c.id,
                "content": c.content,
                "backgroundColor": c.background_color,
                "createdAt": c.created_at,
            }
            for c in node.comments
        ]
    if node.image is not None:
        out["image"] = {
            "url": node.image.url,
            "position": node.image.position,
            "scale": node.image.scale,
        }
    return out


def parse_mind_map(data: dict[str, Any]) -> MindMap:
    return MindMap(
        id=data["id"],
        name=data["name"],
        root=parse_node(data["root"]),
        created_at=data.get("createdAt", ""),
    )


def mind_map_to_dict(mind_map: MindMap) -> dict[str, Any]:
    return {
        "id": mind_map.id,
        "name": mind_map.name,
        "createdAt": mind_map.created_at,
        "root": node_to_dict(mind_map.root),
    }


def normalize_candidate_tree(raw: Any) -> Node:
    """Accept an externally generated tree, assigning fresh ids to every node.

    Only ``label`` (or ``name``) and ``children`` are kept. A top-level list is
    taken to mean its first element.

    Raises:
        ValueError: If there is no usable root object.
    """
    if isinstance(raw, list):
        raw = raw[0] if raw else None
    if not isinstance(raw, dict):
        msg = f"Generated tree has no root object: {raw!r}"
        raise ValueError(msg)

    def enrich(item: Any) -> Node:
        if not isinstance(item, dict):
            return Node(id=new_id(), label=str(item) if item else UNTITLED_LABEL)
        label = item.get("label") or item.get("name") or UNTITLED_LABEL
        children = item.get("children")
        if not isinstance(children, list):
            children = []
        return Node(id=new_id(), label=str(label), children=tuple(enrich(c) for c in children))

    return enrich(raw)
