"""Blob storage client for node images and other uploads."""

import os
import re
import uuid
from urllib.parse import quote

import requests
from loguru import logger

from mindmap_editor.config import (
    BLOB_TOKEN_ENV,
    BLOB_TOKEN_FILES,
    BLOB_URL_ENV,
    DEFAULT_BLOB_URL,
    HTTP_TIMEOUT_SECONDS,
    read_secret,
)
from mindmap_editor.errors import UploadError

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9.-]")


def object_name(filename: str, folder: str) -> str:
    """Build a unique storage key: ``<folder>/<random>-<safe filename>``."""
    safe_name = _UNSAFE_CHARS_RE.sub("_", filename)
    return f"{folder}/{uuid.uuid4().hex}-{safe_name}"


class BlobStorage:
    """Upload payloads to a Firebase-Storage-compatible REST endpoint."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or os.environ.get(BLOB_URL_ENV) or DEFAULT_BLOB_URL).rstrip("/")
        self.token = token if token is not None else read_secret(BLOB_TOKEN_ENV, BLOB_TOKEN_FILES)
        self.sess = session or requests.Session()
        logger.debug("Blob storage ready: {!r}, token {}", self.base_url, bool(self.token))

    def upload(
        self,
        data: bytes,
        filename: str,
        *,
        folder: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Upload ``data`` and return its download URL.

        Raises:
            UploadError: With category unauthenticated, permission-denied or
                transport-error. Failures are not retried.
        """
        if not data:
            raise UploadError("transport-error", "No file data provided.")
        if not self.token:
            raise UploadError("unauthenticated", "No storage credentials; sign in again.")

        name = object_name(filename, folder)
        logger.info("Uploading {} ({} bytes) to {}", filename, len(data), name)
        try:
            r = self.sess.post(
                self.base_url,
                params={"name": name},
                data=data,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": content_type,
                },
                timeout=HTTP_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error("Upload of {} failed: {}", filename, e)
            raise UploadError("transport-error", f"Network error during upload: {e}") from e

        if r.status_code == 401:
            raise UploadError("unauthenticated", "Storage session expired; sign in again.")
        if r.status_code == 403:
            raise UploadError("permission-denied", "Storage rules denied the upload.")
        if not r.ok:
            raise UploadError("transport-error", f"Upload failed with HTTP {r.status_code}.")

        try:
            meta = r.json()
        except ValueError as e:
            logger.error("Upload of {} returned an unreadable response: {}", filename, e)
            raise UploadError("transport-error", "Storage returned an invalid response.") from e
        url = f"{self.base_url}/{quote(meta.get('name', name), safe='')}?alt=media"
        if meta.get("downloadTokens"):
            url += f"&token={meta['downloadTokens']}"
        logger.info("Upload finished: {}", url)
        return url
