"""Mind map editing engine: immutable topic trees, annotations, images and editing sessions."""

from mindmap_editor.core.session.drag import DragSession, DropOutcome
from mindmap_editor.core.session.editor import Editing, EditingSession, Idle
from mindmap_editor.models.node import Annotation, Attachment, MindMap, Node
from mindmap_editor.store import MapStore

__all__ = [
    "Annotation",
    "Attachment",
    "DragSession",
    "DropOutcome",
    "Editing",
    "EditingSession",
    "Idle",
    "MapStore",
    "MindMap",
    "Node",
]
