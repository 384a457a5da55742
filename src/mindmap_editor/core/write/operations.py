"""Load-mutate-save operations on stored maps, with result dicts for CLI and MCP use."""

import math
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from loguru import logger

from mindmap_editor.config import DEFAULT_NODE_LABEL, IMAGE_FOLDER
from mindmap_editor.core.tree import annotations, attachments
from mindmap_editor.core.tree.mutation import (
    ROOT_DELETE_REJECTED,
    Direction,
    delete_subtree,
    insert_child,
    move_rejection,
    patch_node,
    reorder_sibling,
    reparent,
)
from mindmap_editor.core.tree.navigation import locate
from mindmap_editor.core.tree.palette import DEFAULT_POSTIT_COLOR, is_valid_color
from mindmap_editor.errors import CollaboratorError
from mindmap_editor.models.node import (
    IMAGE_POSITIONS,
    Annotation,
    ImagePosition,
    MindMap,
    Node,
    new_id,
)
from mindmap_editor.protocols import BlobStorageProtocol, TreeGeneratorProtocol
from mindmap_editor.store import MapStore


def _error(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def _load(store: MapStore, map_ref: str) -> MindMap | None:
    map_id = store.resolve(map_ref)
    return store.load(map_id) if map_id else None


def _apply(
    store: MapStore,
    map_ref: str,
    node_id: str,
    change: Callable[[Node], Node],
    **extra: Any,
) -> dict[str, Any]:
    """Run ``change`` on the map's tree after checking ``node_id`` exists, then save."""
    mind_map = _load(store, map_ref)
    if mind_map is None:
        return _error(f"Map '{map_ref}' not found.")
    if locate(mind_map.root, node_id) is None:
        return _error(f"Node '{node_id}' not found.")
    new_root = change(mind_map.root)
    changed = new_root is not mind_map.root
    if changed:
        store.save(replace(mind_map, root=new_root))
        logger.info("Saved map {} after change to node {}", mind_map.id, node_id)
    return {"success": True, "node_id": node_id, "changed": changed, **extra}


def add_node(
    store: MapStore,
    *,
    map_ref: str,
    parent_id: str,
    label: str = DEFAULT_NODE_LABEL,
) -> dict[str, Any]:
    """Append a new child under ``parent_id``."""
    child_id = new_id()
    result = _apply(
        store,
        map_ref,
        parent_id,
        lambda root: insert_child(root, parent_id, label=label, child_id=child_id),
    )
    if not result["success"]:
        return result
    return {"success": True, "node_id": child_id, "parent_id": parent_id}


def edit_node(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    label: str | None = None,
    color: str | None = None,
    clear_color: bool = False,
) -> dict[str, Any]:
    """Change a node's label and/or color.

    Args:
        store: Map store.
        map_ref: Map id or name.
        node_id: ID of the node to edit.
        label: New label markup.
        color: Palette token or ``#hex`` color.
        clear_color: Remove the color so the node inherits its depth color.
    """
    changes: dict[str, Any] = {}
    if label is not None:
        changes["label"] = label
    if color is not None:
        if not is_valid_color(color):
            return _error(f"Invalid color '{color}'.")
        changes["color"] = color
    elif clear_color:
        changes["color"] = None

    if not changes:
        return _error("No fields to update.")
    return _apply(store, map_ref, node_id, lambda root: patch_node(root, node_id, **changes))


def delete_node(store: MapStore, *, map_ref: str, node_id: str) -> dict[str, Any]:
    """Delete a node and all of its descendants. The root is refused."""
    mind_map = _load(store, map_ref)
    if mind_map is None:
        return _error(f"Map '{map_ref}' not found.")
    if node_id == mind_map.root.id:
        return _error(ROOT_DELETE_REJECTED)
    return _apply(
        store, map_ref, node_id, lambda root: delete_subtree(root, node_id) or root
    )


def move_node(
    store: MapStore,
    *,
    map_ref: str,
    source_id: str,
    target_id: str,
) -> dict[str, Any]:
    """Reparent ``source_id`` under ``target_id`` (as its last child)."""
    mind_map = _load(store, map_ref)
    if mind_map is None:
        return _error(f"Map '{map_ref}' not found.")
    if locate(mind_map.root, target_id) is None:
        return _error(f"Node '{target_id}' not found.")
    reason = move_rejection(mind_map.root, source_id, target_id)
    if reason is not None:
        return _error(reason)
    return _apply(
        store,
        map_ref,
        source_id,
        lambda root: reparent(root, source_id, target_id),
        parent_id=target_id,
    )


def reorder_node(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    direction: Direction,
) -> dict[str, Any]:
    """Swap a node with its previous or next sibling; no change at either end."""
    if direction not in ("previous", "next"):
        return _error(f"Invalid direction '{direction}'.")
    return _apply(
        store, map_ref, node_id, lambda root: reorder_sibling(root, node_id, direction)
    )


def add_comment(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    content: str,
    background_color: str = DEFAULT_POSTIT_COLOR,
) -> dict[str, Any]:
    comment_id = new_id()
    result = _apply(
        store,
        map_ref,
        node_id,
        lambda root: annotations.add_comment(
            root, node_id, content, background_color=background_color, comment_id=comment_id
        ),
    )
    if result["success"]:
        result["comment_id"] = comment_id
    return result


def edit_comment(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    comment_id: str,
    content: str | None = None,
    background_color: str | None = None,
) -> dict[str, Any]:
    if content is None and background_color is None:
        return _error("No fields to update.")
    result = _apply(
        store,
        map_ref,
        node_id,
        lambda root: annotations.edit_comment(
            root, node_id, comment_id, content=content, background_color=background_color
        ),
    )
    if result["success"] and not result["changed"]:
        if not any(c.id == comment_id for c in _comments(store, map_ref, node_id)):
            return _error(f"Comment '{comment_id}' not found.")
    return result


def delete_comment(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    comment_id: str,
) -> dict[str, Any]:
    result = _apply(
        store,
        map_ref,
        node_id,
        lambda root: annotations.delete_comment(root, node_id, comment_id),
    )
    if result["success"] and not result["changed"]:
        return _error(f"Comment '{comment_id}' not found.")
    return result


def _comments(store: MapStore, map_ref: str, node_id: str) -> tuple[Annotation, ...]:
    mind_map = _load(store, map_ref)
    return () if mind_map is None else annotations.get_comments(mind_map.root, node_id)


def set_node_image(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    url: str,
    position: ImagePosition = "top",
    scale: float = 1.0,
) -> dict[str, Any]:
    if position not in IMAGE_POSITIONS:
        return _error(f"Invalid image position '{position}'.")
    if not math.isfinite(scale):
        return _error(f"Invalid image scale '{scale}'.")
    return _apply(
        store,
        map_ref,
        node_id,
        lambda root: attachments.set_image(root, node_id, url, position=position, scale=scale),
    )


def update_node_image(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    position: ImagePosition | None = None,
    scale: float | None = None,
) -> dict[str, Any]:
    """Change the position and/or scale of a node's existing image."""
    if position is None and scale is None:
        return _error("No fields to update.")
    if position is not None and position not in IMAGE_POSITIONS:
        return _error(f"Invalid image position '{position}'.")
    if scale is not None and not math.isfinite(scale):
        return _error(f"Invalid image scale '{scale}'.")
    mind_map = _load(store, map_ref)
    node = None if mind_map is None else locate(mind_map.root, node_id)
    if node is not None and node.image is None:
        return _error(f"Node '{node_id}' has no image.")

    def change(root: Node) -> Node:
        if position is not None:
            root = attachments.set_image_position(root, node_id, position)
        if scale is not None:
            root = attachments.set_image_scale(root, node_id, scale)
        return root

    return _apply(store, map_ref, node_id, change)


def resize_node_image(
    store: MapStore,
    *,
    map_ref: str,
    node_id: str,
    steps: int,
) -> dict[str, Any]:
    """Grow or shrink a node's image by ``steps`` increments of the scale step."""
    mind_map = _load(store, map_ref)
    node = None if mind_map is None else locate(mind_map.root, node_id)
    if node is not None and node.image is None:
        return _error(f"Node '{node_id}' has no image.")
    result = _apply(
        store,
        map_ref,
        node_id,
        lambda root: attachments.step_image_scale(root, node_id, steps),
    )
    if result["success"]:
        resized = _load(store, map_ref)
        node = None if resized is None else locate(resized.root, node_id)
        if node is not None and node.image is not None:
            result["scale"] = node.image.scale
    return result


def remove_node_image(store: MapStore, *, map_ref: str, node_id: str) -> dict[str, Any]:
    return _apply(store, map_ref, node_id, lambda root: attachments.remove_image(root, node_id))


def upload_node_image(
    store: MapStore,
    storage: BlobStorageProtocol,
    *,
    map_ref: str,
    node_id: str,
    data: bytes,
    filename: str,
) -> dict[str, Any]:
    """Upload an image and attach it to a node at the default position and scale."""
    mind_map = _load(store, map_ref)
    if mind_map is None:
        return _error(f"Map '{map_ref}' not found.")
    if locate(mind_map.root, node_id) is None:
        return _error(f"Node '{node_id}' not found.")
    try:
        url = storage.upload(data, filename, folder=IMAGE_FOLDER)
    except CollaboratorError as e:
        logger.error("Image upload for node {} failed: {}", node_id, e)
        return _error(f"Image upload failed: {e}")
    result = set_node_image(store, map_ref=map_ref, node_id=node_id, url=url)
    if result["success"]:
        result["url"] = url
    return result


def generate_map(
    store: MapStore,
    generator: TreeGeneratorProtocol,
    *,
    name: str,
    files: list[Any],
) -> dict[str, Any]:
    """Create a new map from a generated tree."""
    try:
        root = generator.generate_tree(files)
    except CollaboratorError as e:
        logger.error("Mind map generation failed: {}", e)
        return _error(f"Generation failed: {e}")
    mind_map = store.create(name, root=root)
    logger.info("Created map {} from {} file(s)", mind_map.id, len(files))
    return {"success": True, "map_id": mind_map.id, "root_id": root.id}


def generate_flashcards(generator: TreeGeneratorProtocol, *, file: Any) -> dict[str, Any]:
    """Generate study flashcards from a single document."""
    try:
        cards = generator.generate_flashcards(file)
    except CollaboratorError as e:
        logger.error("Flashcard generation failed: {}", e)
        return _error(f"Generation failed: {e}")
    return {
        "success": True,
        "count": len(cards),
        "flashcards": [{"id": c.id, "question": c.question, "answer": c.answer} for c in cards],
    }
