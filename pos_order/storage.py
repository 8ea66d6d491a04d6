"""Menu image storage in a Supabase storage bucket."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import PurePosixPath
from uuid import uuid4

import httpx

from pos_order.config import HTTP_TIMEOUT_SECONDS, STORAGE_BUCKET
from pos_order.gateway import auth_headers
from pos_order.result import Err, Ok, Result

logger = logging.getLogger(__name__)

_PERMISSION_HINT = "Check the storage bucket policies."


@dataclass(frozen=True)
class StoredObject:
    """Where an uploaded object lives."""

    public_url: str
    path: str


def object_name(filename: str, folder: str = "menu") -> str:
    """Build a collision-free object name that keeps the file extension."""
    suffix = PurePosixPath(filename).suffix.lower()
    return f"{folder.strip('/')}/{uuid4().hex}{suffix}"


def _is_permission_error(response: httpx.Response) -> bool:
    return response.status_code in {401, 403} or "row-level security" in response.text.lower()


class ImageStorage:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str = STORAGE_BUCKET,
        client: httpx.Client | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = auth_headers(api_key)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def upload(self, data: bytes, filename: str, folder: str = "menu") -> Result[StoredObject]:
        """Upload image bytes and return the public URL and object path."""
        path = object_name(filename, folder)
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        headers = {
            **self._headers,
            "Content-Type": content_type,
            "cache-control": "max-age=3600",
            "x-upsert": "false",
        }
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"
        try:
            response = self._client.post(url, content=data, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("storage_upload_failed path=%s error=%r", path, exc)
            return Err(f"Storage upload failed: {exc}")

        if response.is_error:
            logger.error("storage_upload_rejected path=%s status=%s", path, response.status_code)
            if _is_permission_error(response):
                return Err(f"Storage upload failed due to permissions. {_PERMISSION_HINT}", response.status_code)
            return Err(f"Storage upload failed: {response.text}", response.status_code)

        logger.info("storage_uploaded path=%s bytes=%d", path, len(data))
        return Ok(StoredObject(public_url=self.public_url(path), path=path))

    def delete(self, path: str) -> Result[None]:
        url = f"{self.base_url}/storage/v1/object/{self.bucket}"
        try:
            response = self._client.request("DELETE", url, json={"prefixes": [path]}, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.error("storage_delete_failed path=%s error=%r", path, exc)
            return Err(f"Storage delete failed: {exc}")

        if response.is_error:
            logger.error("storage_delete_rejected path=%s status=%s", path, response.status_code)
            if _is_permission_error(response):
                return Err(f"Storage delete failed due to permissions. {_PERMISSION_HINT}", response.status_code)
            return Err(f"Storage delete failed: {response.text}", response.status_code)

        logger.info("storage_deleted path=%s", path)
        return Ok(None)
