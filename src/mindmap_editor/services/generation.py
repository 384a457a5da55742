"""Generative content client: mind map trees and flashcards from documents."""

import base64
import json
import re
from dataclasses import dataclass
from typing import Any

import requests
from loguru import logger

from mindmap_editor.config import (
    GENAI_BASE_URL,
    GENAI_KEY_ENV,
    GENAI_KEY_FILES,
    GENAI_MODEL,
    HTTP_TIMEOUT_SECONDS,
    read_secret,
)
from mindmap_editor.core.importer.json_reader import normalize_candidate_tree
from mindmap_editor.errors import GenerationError
from mindmap_editor.models.node import Flashcard, Node, new_id

_FENCE_RE = re.compile(r"```(?:json)?")
_DATA_URL_PREFIX_RE = re.compile(r"^data:.*?;base64,")

MIND_MAP_PROMPT = """Analyze the attached documents and build a structured, didactic MIND MAP.

Output rules:
1. Return ONLY a valid JSON object. Do not use Markdown fences.
2. The JSON must describe a tree of nodes.
3. Every node has the shape: { "label": "Topic name", "children": [ ...nodes... ] }
4. The root node is the central topic of the documents.
5. Go deep enough to cover the important details (at least 3 levels when there is content).
6. Keep labels short."""

FLASHCARD_PROMPT = """Analyze the attached PDF document.
Write question/answer flashcards for active recall of its content.
Focus on key concepts, deadlines, exceptions and general rules.
Questions must be direct; answers explanatory but concise.
Produce between 5 and 15 flashcards depending on the density of the content.
Return ONLY a JSON array of objects with "question" and "answer" keys."""


@dataclass(frozen=True)
class FilePayload:
    """A document sent to the generative service."""

    data: bytes
    mime_type: str = "application/pdf"

    @classmethod
    def from_base64(cls, encoded: str, mime_type: str = "application/pdf") -> "FilePayload":
        """Build a payload from base64 text, tolerating a ``data:...;base64,`` prefix."""
        return cls(base64.b64decode(_DATA_URL_PREFIX_RE.sub("", encoded)), mime_type)


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _inline_part(payload: FilePayload) -> dict[str, Any]:
    # Generic types such as application/octet-stream are sent as PDF.
    mime_type = payload.mime_type if "pdf" in payload.mime_type else "application/pdf"
    return {
        "inline_data": {
            "mime_type": mime_type,
            "data": base64.b64encode(payload.data).decode("ascii"),
        }
    }


class TreeGenerator:
    """Client for the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = GENAI_MODEL,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else read_secret(GENAI_KEY_ENV, GENAI_KEY_FILES)
        if not self.api_key:
            logger.warning("No generative API key found; requests will be rejected")
        self.model = model
        self.sess = session or requests.Session()

    def _generate(self, parts: list[dict[str, Any]]) -> Any:
        url = f"{GENAI_BASE_URL}/models/{self.model}:generateContent"
        body = {
            "contents": [{"parts": parts}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        logger.debug("Making request: {!r} with {} part(s)", url, len(parts))
        try:
            r = self.sess.post(
                url,
                params={"key": self.api_key or ""},
                json=body,
                timeout=HTTP_TIMEOUT_SECONDS,
            )
            r.raise_for_status()
            rv: dict[str, Any] = r.json()
        except requests.RequestException as e:
            logger.error("Generation request failed: {}", e)
            msg = f"Generation request failed: {e}"
            raise GenerationError(msg) from e

        try:
            text = "".join(p.get("text", "") for p in rv["candidates"][0]["content"]["parts"])
        except (KeyError, IndexError, TypeError) as e:
            msg = f"Unexpected generation response: {rv!r}"
            raise GenerationError(msg) from e
        if not text.strip():
            msg = "Empty response from generation service"
            raise GenerationError(msg)

        try:
            return json.loads(strip_fences(text))
        except json.JSONDecodeError as e:
            msg = f"Generation service returned invalid JSON: {e}"
            raise GenerationError(msg) from e

    def generate_tree(self, files: list[FilePayload]) -> Node:
        """Generate a mind map from documents; every node gets a fresh id."""
        if not files:
            msg = "No files to generate from"
            raise GenerationError(msg)
        raw = self._generate([*(_inline_part(f) for f in files), {"text": MIND_MAP_PROMPT}])
        try:
            return normalize_candidate_tree(raw)
        except ValueError as e:
            raise GenerationError(str(e)) from e

    def generate_flashcards(self, file: FilePayload) -> list[Flashcard]:
        raw = self._generate([_inline_part(file), {"text": FLASHCARD_PROMPT}])
        if not isinstance(raw, list):
            msg = f"Expected a list of flashcards, got {type(raw).__name__}"
            raise GenerationError(msg)
        return [
            Flashcard(id=new_id(), question=str(c.get("question", "")), answer=str(c.get("answer", "")))
            for c in raw
            if isinstance(c, dict)
        ]
