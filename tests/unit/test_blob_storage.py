"""Tests for the blob storage upload client."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from mindmap_editor.core.write import operations
from mindmap_editor.errors import UploadError
from mindmap_editor.models.node import MindMap
from mindmap_editor.services.blob_storage import BlobStorage, object_name
from mindmap_editor.store import MapStore


def _make_response(status: int, data: dict[str, Any] | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = data or {}
    return response


def _storage(session: MagicMock, token: str | None = "tok") -> BlobStorage:
    return BlobStorage(base_url="https://blobs.test/o/", token=token, session=session)


def test_object_name_is_unique_and_safe() -> None:
    first = object_name("my photo (1).png", "mindmap_images")
    second = object_name("my photo (1).png", "mindmap_images")
    assert first != second
    assert first.startswith("mindmap_images/")
    assert first.endswith("-my_photo__1_.png")


def test_upload_returns_download_url() -> None:
    session = MagicMock()
    session.post.return_value = _make_response(
        200, {"name": "mindmap_images/x-a.png", "downloadTokens": "dl"}
    )

    url = _storage(session).upload(b"data", "a.png", folder="mindmap_images")

    assert url == "https://blobs.test/o/mindmap_images%2Fx-a.png?alt=media&token=dl"
    call = session.post.call_args
    assert call.args[0] == "https://blobs.test/o"
    assert call.kwargs["headers"]["Authorization"] == "Bearer tok"
    assert call.kwargs["params"]["name"].startswith("mindmap_images/")
    assert call.kwargs["data"] == b"data"


def test_upload_without_download_token() -> None:
    session = MagicMock()
    session.post.return_value = _make_response(200, {"name": "f/a.png"})
    url = _storage(session).upload(b"data", "a.png", folder="f")
    assert url == "https://blobs.test/o/f%2Fa.png?alt=media"


def test_empty_data_rejected_before_request() -> None:
    session = MagicMock()
    with pytest.raises(UploadError) as exc_info:
        _storage(session).upload(b"", "a.png", folder="f")
    assert exc_info.value.category == "transport-error"
    session.post.assert_not_called()


def test_missing_token_is_unauthenticated() -> None:
    session = MagicMock()
    with pytest.raises(UploadError) as exc_info:
        _storage(session, token="").upload(b"data", "a.png", folder="f")
    assert exc_info.value.category == "unauthenticated"
    session.post.assert_not_called()


@pytest.mark.parametrize(
    ("status", "category"),
    [
        (401, "unauthenticated"),
        (403, "permission-denied"),
        (500, "transport-error"),
    ],
)
def test_http_failures_are_categorized(status: int, category: str) -> None:
    session = MagicMock()
    session.post.return_value = _make_response(status)
    with pytest.raises(UploadError) as exc_info:
        _storage(session).upload(b"data", "a.png", folder="f")
    assert exc_info.value.category == category


def test_network_error_is_transport_error() -> None:
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("offline")
    with pytest.raises(UploadError) as exc_info:
        _storage(session).upload(b"data", "a.png", folder="f")
    assert exc_info.value.category == "transport-error"
    assert session.post.call_count == 1


def test_token_read_from_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    token_file = tmp_path / "token.txt"
    token_file.write_text("file-token\n")
    monkeypatch.delenv("MINDMAP_BLOB_TOKEN", raising=False)
    monkeypatch.setattr("mindmap_editor.services.blob_storage.BLOB_TOKEN_FILES", [token_file])

    storage = BlobStorage(base_url="https://blobs.test/o", session=MagicMock())

    assert storage.token == "file-token"


def test_unreadable_success_body_is_transport_error() -> None:
    session = MagicMock()
    response = _make_response(200)
    response.json.side_effect = requests.exceptions.JSONDecodeError("x", "<html>", 0)
    session.post.return_value = response

    with pytest.raises(UploadError) as exc_info:
        _storage(session).upload(b"data", "a.png", folder="f")

    assert exc_info.value.category == "transport-error"


def test_unreadable_body_becomes_error_result(store: MapStore, stored_map: MindMap) -> None:
    session = MagicMock()
    response = _make_response(200)
    response.json.side_effect = requests.exceptions.JSONDecodeError("x", "<html>", 0)
    session.post.return_value = response

    result = operations.upload_node_image(
        store,
        _storage(session),
        map_ref="study",
        node_id="A",
        data=b"png",
        filename="a.png",
    )

    assert result["success"] is False
    assert "invalid response" in result["error"]
    assert store.load("study") == stored_map
