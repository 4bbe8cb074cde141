"""Object storage for uploaded receipt images.

Two backends share the ``ObjectStorage`` protocol:

- ``SupabaseStorage``: the hosted platform's storage REST API over httpx
- ``LocalFileStorage``: files under a local directory, for development and tests
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os
import httpx

from neopay.config import Settings
from neopay.errors import InternalError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"

_DATA_URL_RE = re.compile(r"^data:(?P<content_type>[\w.+-]+/[\w.+-]+);base64,")


@dataclass(frozen=True)
class StoredObject:
    """Where an uploaded object ended up."""

    path: str
    public_url: str


class ObjectStorage(Protocol):
    async def upload(self, path: str, content: bytes, content_type: str) -> StoredObject: ...

    async def delete(self, path: str) -> None: ...

    async def close(self) -> None: ...


def decode_upload_payload(file_data: str) -> tuple[bytes, str]:
    """Decode a base64 upload, with or without a ``data:`` URL prefix.

    Returns:
        (content, content_type); content type defaults to image/jpeg.

    Raises:
        ValidationError: If the payload is not valid base64.
    """
    content_type = DEFAULT_CONTENT_TYPE
    match = _DATA_URL_RE.match(file_data)
    if match:
        content_type = match.group("content_type")
        file_data = file_data[match.end():]
    try:
        return base64.b64decode(file_data, validate=True), content_type
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid file data: expected base64") from e


def receipt_object_path(driver_id: int, file_name: str, timestamp_ms: int) -> str:
    """Storage path for a receipt upload: receipts/{driver}/{millis}_{name}."""
    safe_name = Path(file_name).name or "receipt"
    return f"receipts/{driver_id}/{timestamp_ms}_{safe_name}"


class SupabaseStorage:
    """Bucket storage on the hosted platform, via its REST API."""

    def __init__(self, base_url: str, service_key: str, bucket: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
        )

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    async def upload(self, path: str, content: bytes, content_type: str) -> StoredObject:
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"
        try:
            response = await self._client.post(
                url,
                content=content,
                headers={"Content-Type": content_type, "x-upsert": "false"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Upload of %s to bucket %s failed: %s", path, self.bucket, e)
            raise InternalError("Failed to upload receipt", detail=str(e)) from e

        return StoredObject(path=path, public_url=self.public_url(path))

    async def delete(self, path: str) -> None:
        url = f"{self.base_url}/storage/v1/object/{self.bucket}"
        try:
            response = await self._client.request("DELETE", url, json={"prefixes": [path]})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Delete of %s from bucket %s failed: %s", path, self.bucket, e)
            raise InternalError("Failed to delete receipt file", detail=str(e)) from e

    async def close(self) -> None:
        await self._client.aclose()


class LocalFileStorage:
    """Stores objects as files under ``root``."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root not in target.parents:
            raise ValidationError(f"Invalid storage path: {path}")
        return target

    async def upload(self, path: str, content: bytes, content_type: str) -> StoredObject:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(target, mode="wb") as f:
            await f.write(content)
        logger.debug("Stored %s (%s, %d bytes)", target, content_type, len(content))
        return StoredObject(path=path, public_url=target.as_uri())

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            logger.warning("Stored object %s was already gone", path)

    async def close(self) -> None:
        return None


def build_storage(settings: Settings) -> ObjectStorage:
    """Construct the configured storage backend."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError(
                "Supabase storage requires SUPABASE_URL and SUPABASE_KEY to be set"
            )
        return SupabaseStorage(
            settings.supabase_url, settings.supabase_key, settings.storage_bucket
        )
    if settings.storage_backend == "local":
        return LocalFileStorage(settings.local_storage_dir)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")
