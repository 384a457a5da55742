"""Domain models for mind map documents."""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

ImagePosition = Literal["top", "bottom", "left", "right"]
IMAGE_POSITIONS: tuple[ImagePosition, ...] = ("top", "bottom", "left", "right")


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class Annotation:
    """A sticky note attached to a node."""

    id: str
    content: str
    background_color: str
    created_at: str


@dataclass(frozen=True)
class Attachment:
    """An image shown next to a node's label."""

    url: str
    position: ImagePosition
    scale: float


@dataclass(frozen=True)
class Node:
    """A single topic in a mind map tree.

    ``comments`` is None when the node never had annotations; ``image`` is None
    when there is no attachment (removal also sets it back to None).
    """

    id: str
    label: str
    children: tuple["Node", ...] = ()
    color: str | None = None
    comments: tuple[Annotation, ...] | None = None
    image: Attachment | None = None


@dataclass(frozen=True)
class MindMap:
    """A persisted mind map document."""

    id: str
    name: str
    root: Node
    created_at: str = field(default_factory=utc_now_iso)


@dataclass(frozen=True)
class Breadcrumb:
    """A single ancestor in a breadcrumb trail."""

    node_id: str
    label: str
    depth: int


@dataclass(frozen=True)
class Flashcard:
    """A question/answer pair produced by the generative service."""

    id: str
    question: str
    answer: str
