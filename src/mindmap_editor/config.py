"""Configuration constants for the mind map editor."""

import os
from pathlib import Path
from typing import Final

# Directory with map documents. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/mindmap-editor").expanduser(),
    Path("~/.mindmap-editor").expanduser(),
    Path("~/.config/mindmap-editor").expanduser(),
]

DATA_DIR_ENV = "MINDMAP_DATA_DIR"

DEFAULT_NODE_LABEL = "New Topic"
DEFAULT_ROOT_LABEL = "Central Topic"

IMAGE_SCALE_MIN = 0.5
IMAGE_SCALE_MAX = 2.5
IMAGE_SCALE_STEP = 0.1
DEFAULT_IMAGE_SCALE = 1.0
DEFAULT_IMAGE_POSITION: Final = "top"

# Folder hint passed to blob storage for node images.
IMAGE_FOLDER = "mindmap_images"

# Blob storage token location. First file found is used; env var wins.
BLOB_TOKEN_ENV = "MINDMAP_BLOB_TOKEN"
BLOB_TOKEN_FILES: list[Path] = [
    Path("~/.config/mindmap-editor/blob-token.txt").expanduser(),
    Path("~/.config/secret/mindmap-blob-token.txt").expanduser(),
]
BLOB_URL_ENV = "MINDMAP_BLOB_URL"
DEFAULT_BLOB_URL = "http://localhost:9199/v0/b/mindmap/o"

# Generative content service (Gemini REST API).
GENAI_KEY_ENV = "GEMINI_API_KEY"
GENAI_KEY_FILES: list[Path] = [
    Path("~/.config/mindmap-editor/gemini-key.txt").expanduser(),
    Path("~/.config/secret/gemini-key.txt").expanduser(),
]
GENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GENAI_MODEL = "gemini-2.0-flash"

HTTP_TIMEOUT_SECONDS = 120


def resolve_data_directory() -> Path:
    """Return the map store directory.

    The env var wins; otherwise the first existing candidate, falling back to the
    first candidate when none exists yet.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]


def read_secret(env_var: str, files: list[Path]) -> str | None:
    """Read a token from the environment or the first token file found."""
    value = os.environ.get(env_var)
    if value:
        return value.strip()
    for path in files:
        try:
            return path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            pass
    return None
