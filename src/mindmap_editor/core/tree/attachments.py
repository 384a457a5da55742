"""The optional image attached to a node.

An image is always written as a whole ``Attachment``. Adjusting one setting
copies the current attachment and overwrites that setting only; nodes without
an image are left alone.
"""

import math
from dataclasses import replace

from loguru import logger

from mindmap_editor.config import (
    DEFAULT_IMAGE_POSITION,
    DEFAULT_IMAGE_SCALE,
    IMAGE_SCALE_MAX,
    IMAGE_SCALE_MIN,
    IMAGE_SCALE_STEP,
)
from mindmap_editor.core.tree.mutation import patch_node
from mindmap_editor.core.tree.navigation import locate
from mindmap_editor.models.node import IMAGE_POSITIONS, Attachment, ImagePosition, Node


def clamp_scale(scale: float) -> float:
    """Clamp to the configured range.

    Raises:
        ValueError: If ``scale`` is NaN or infinite.
    """
    if not math.isfinite(scale):
        msg = f"Image scale must be a finite number, got {scale!r}"
        raise ValueError(msg)
    return min(max(scale, IMAGE_SCALE_MIN), IMAGE_SCALE_MAX)


def _check_position(position: str) -> None:
    if position not in IMAGE_POSITIONS:
        msg = f"Invalid image position {position!r}, expected one of {IMAGE_POSITIONS!r}"
        raise ValueError(msg)


def set_image(
    root: Node,
    node_id: str,
    url: str,
    *,
    position: ImagePosition = DEFAULT_IMAGE_POSITION,
    scale: float = DEFAULT_IMAGE_SCALE,
) -> Node:
    """Attach an image to ``node_id``, replacing any existing one."""
    _check_position(position)
    image = Attachment(url=url, position=position, scale=clamp_scale(scale))
    return patch_node(root, node_id, image=image)


def _adjust(root: Node, node_id: str, **changes: object) -> Node:
    node = locate(root, node_id)
    if node is None or node.image is None:
        logger.debug("No image on node {}, ignoring image update", node_id)
        return root
    return patch_node(root, node_id, image=replace(node.image, **changes))


def set_image_position(root: Node, node_id: str, position: ImagePosition) -> Node:
    _check_position(position)
    return _adjust(root, node_id, position=position)


def set_image_scale(root: Node, node_id: str, scale: float) -> Node:
    """Change the scale of an existing image, clamped to the configured range."""
    return _adjust(root, node_id, scale=clamp_scale(scale))


def remove_image(root: Node, node_id: str) -> Node:
    return patch_node(root, node_id, image=None)


def step_image_scale(root: Node, node_id: str, steps: int) -> Node:
    """Grow (positive ``steps``) or shrink an existing image by whole steps."""
    node = locate(root, node_id)
    if node is None or node.image is None:
        logger.debug("No image on node {}, ignoring image resize", node_id)
        return root
    scale = clamp_scale(round(node.image.scale + steps * IMAGE_SCALE_STEP, 1))
    if scale == node.image.scale:
        return root
    return patch_node(root, node_id, image=replace(node.image, scale=scale))
