"""Object storage for generated binary assets, with an inline fallback."""

from __future__ import annotations

import base64
import logging
import os
from typing import Protocol

import requests

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the storage endpoint returns an unusable response."""


class ObjectStorage(Protocol):
    def upload(self, data: bytes, mime_type: str) -> str: ...


def data_uri(data: bytes, mime_type: str) -> str:
    b64 = base64.b64encode(data).decode("utf-8")
    mime = mime_type or "application/octet-stream"
    return f"data:{mime};base64,{b64}"


class HttpObjectStorage:
    """PUT uploads to a storage endpoint that answers with ``{"url": ...}``.

    Upload failures never propagate: the asset degrades to a data URI.
    """

    def __init__(self, upload_url: str, *, api_key: str | None = None, request_timeout_s: float = 30.0):
        if not upload_url.strip():
            raise ValueError("upload_url must be provided.")
        self.upload_url = upload_url
        self.api_key = api_key
        self.request_timeout_s = request_timeout_s

    def upload(self, data: bytes, mime_type: str) -> str:
        try:
            return self._put(data, mime_type)
        except (requests.RequestException, ValueError, StorageError) as e:
            logger.warning(f"Upload of {len(data)} bytes failed, falling back to inline data URI: {e}")
            return data_uri(data, mime_type)

    def _put(self, data: bytes, mime_type: str) -> str:
        headers = {"Accept": "application/json", "Content-Type": mime_type}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        response = requests.put(self.upload_url, data=data, headers=headers, timeout=self.request_timeout_s)
        response.raise_for_status()
        body = response.json()
        url = body.get("url") if isinstance(body, dict) else None
        if not url:
            raise StorageError(f"Upload response has no url: {body}")
        return str(url)


def create_storage(upload_url: str | None, *, request_timeout_s: float = 30.0) -> ObjectStorage | None:
    """``None`` when no endpoint is configured."""
    if not upload_url:
        return None
    return HttpObjectStorage(
        upload_url,
        api_key=os.getenv("STORAGE_API_KEY"),
        request_timeout_s=request_timeout_s,
    )
