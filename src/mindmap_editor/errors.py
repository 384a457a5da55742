"""Exceptions raised by external collaborators."""

from typing import Literal

UploadFailure = Literal["unauthenticated", "permission-denied", "transport-error"]


class CollaboratorError(RuntimeError):
    """An external service failed. The tree is never touched when this is raised."""


class UploadError(CollaboratorError):
    """Blob storage rejected or failed an upload."""

    def __init__(self, category: UploadFailure, message: str) -> None:
        super().__init__(message)
        self.category = category


class GenerationError(CollaboratorError):
    """The generative content service failed or returned unusable output."""
