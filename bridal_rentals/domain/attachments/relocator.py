"""Move files uploaded alongside an approval request into their final folder.

Files attached to a pending approval live under the temporary ``approvals/``
area of the blob store. Once the request is approved they are copied into the
resource's own upload folder; the temporary copy is removed after the change
is saved.
"""

from __future__ import annotations

import mimetypes
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import quote, unquote, urlparse

from bridal_rentals.core.clock import utcnow
from bridal_rentals.core.errors import BlobStorageError
from bridal_rentals.infrastructure.storage import BlobInfo, BlobStore
from bridal_rentals.observability.tracing import log_event

from .attachment import Attachment, FileType, file_type_from_extension, filename_from_url

_UPLOAD_FOLDERS: dict[str, dict[FileType, str]] = {
    "customer": {
        FileType.IMAGE: "uploads/customers/images",
        FileType.VIDEO: "uploads/customers/documents",
    },
    "item": {
        FileType.IMAGE: "uploads/products/images",
        FileType.VIDEO: "uploads/products/videos",
    },
}

_DEFAULT_FOLDERS = {
    "customer": "uploads/customers/documents",
    "item": "uploads/products/documents",
    "payment": "uploads/payment",
    "reservation": "uploads/reservations",
    "cost": "uploads/costs",
}


def destination_folder(resource_type: str, file_type: FileType) -> str:
    by_type = _UPLOAD_FOLDERS.get(resource_type, {})
    if file_type in by_type:
        return by_type[file_type]
    return _DEFAULT_FOLDERS.get(resource_type, "uploads/general")


@dataclass(frozen=True)
class BlobMove:
    source: str
    destination: str


class AttachmentRelocator:
    """
    Relocates approval-time uploads into resource folders.

    Responsibilities:
    - Recognise urls under the temporary approvals area
    - Copy each file to its resource/file-type folder
    - Fill in name/size/type/uploadedAt when the request omitted them

    Copies are only staged: the originals stay in place until ``commit``
    runs after the database write, and ``discard`` removes the copies when
    that write fails. A pending request therefore always points at files
    that still exist.

    A failure on one file never aborts the others: the original reference
    is kept, with whatever fields can be derived from its url.
    """

    def __init__(self, blob_store: BlobStore, *, approvals_prefix: str = "approvals/") -> None:
        self._store = blob_store
        self._prefix = approvals_prefix.strip("/") + "/"
        self._moves: list[BlobMove] = []

    @property
    def moves(self) -> list[BlobMove]:
        return list(self._moves)

    def is_pending_upload(self, url: str | None) -> bool:
        if not url:
            return False
        path = unquote(urlparse(url).path or url).lstrip("/")
        return path.startswith(self._prefix) or f"/{self._prefix}" in path

    async def relocate_all(
        self,
        attachments: list[Any] | None,
        resource_type: str,
        *,
        trace_id: str,
    ) -> list[Any]:
        """Relocate every attachment, one after the other."""
        relocated: list[Any] = []
        for attachment in attachments or []:
            relocated.append(await self.relocate(attachment, resource_type, trace_id=trace_id))
        return relocated

    async def relocate(self, attachment: Any, resource_type: str, *, trace_id: str) -> Any:
        if isinstance(attachment, str):
            return await self.relocate_url(attachment, resource_type, trace_id=trace_id)
        if not isinstance(attachment, dict):
            return attachment

        url = attachment.get("url") or attachment.get("link")
        if not self.is_pending_upload(url):
            return attachment

        try:
            blob, content = await self._fetch(url)
            name = attachment.get("name") or filename_from_url(blob.pathname)
            file_type = file_type_from_extension(name)
            new_blob = await self._store_in_folder(name, content, blob, resource_type, file_type)
        except Exception as exc:
            log_event(
                "attachment.relocation_failed",
                trace_id=trace_id,
                url=url,
                resource_type=resource_type,
                error=str(exc),
            )
            return self._backfill(attachment, url)

        self._moves.append(BlobMove(source=blob.url, destination=new_blob.url))
        log_event(
            "attachment.relocated",
            trace_id=trace_id,
            source=url,
            destination=new_blob.url,
            resource_type=resource_type,
        )
        moved = {**attachment, "name": name, "url": new_blob.url, "link": new_blob.url}
        return self._backfill(moved, new_blob.url, default_size=len(content))

    async def relocate_url(self, url: str, resource_type: str, *, trace_id: str) -> str:
        """Relocate a bare url (product photos and videos are stored as strings)."""
        if not self.is_pending_upload(url):
            return url
        relocated = await self.relocate({"url": url}, resource_type, trace_id=trace_id)
        return relocated["url"]

    async def commit(self, *, trace_id: str) -> None:
        """Drop the staged originals once the new urls are saved."""
        moves, self._moves = self._moves, []
        for move in moves:
            await self._delete_quietly(move.source, trace_id=trace_id)

    async def discard(self, *, trace_id: str) -> None:
        """Remove the copies made for a write that did not happen."""
        moves, self._moves = self._moves, []
        for move in moves:
            await self._delete_quietly(move.destination, trace_id=trace_id)
        if moves:
            log_event("attachment.relocation_discarded", trace_id=trace_id, count=len(moves))

    async def _delete_quietly(self, url: str, *, trace_id: str) -> None:
        try:
            await self._store.delete(url)
        except Exception as exc:
            log_event("attachment.delete_failed", trace_id=trace_id, url=url, error=str(exc))

    async def _fetch(self, url: str) -> tuple[BlobInfo, bytes]:
        blob = await self._locate(url)
        content = await self._store.download(blob.url)
        return blob, content

    async def _locate(self, url: str) -> BlobInfo:
        raw_name = PurePosixPath(urlparse(url).path).name
        decoded = unquote(raw_name)
        candidates = {raw_name, decoded, quote(decoded)}

        blobs = await self._store.list(self._prefix)
        for blob in blobs:
            if blob.url == url:
                return blob
        for blob in blobs:
            if PurePosixPath(blob.pathname).name in candidates:
                return blob
        raise BlobStorageError(f"No blob under '{self._prefix}' matches {decoded}")

    async def _store_in_folder(
        self,
        name: str,
        content: bytes,
        source: BlobInfo,
        resource_type: str,
        file_type: FileType,
    ) -> BlobInfo:
        folder = destination_folder(resource_type, file_type)
        pathname = f"{folder}/{int(time.time() * 1000)}-{name}"
        content_type = source.content_type or mimetypes.guess_type(name)[0]
        return await self._store.put(pathname, content, content_type)

    @staticmethod
    def _backfill(attachment: dict, url: str, default_size: int = 0) -> dict:
        name = attachment.get("name") or filename_from_url(url) or "file"
        size = attachment.get("size")
        file_type = attachment.get("type")
        if file_type not in {t.value for t in FileType}:
            file_type = file_type_from_extension(name)
        return Attachment.model_validate(
            {
                **attachment,
                "url": attachment.get("url") or url,
                "name": name,
                "size": int(size) if isinstance(size, (int, float)) and size >= 0 else default_size,
                "type": file_type,
                "uploadedAt": attachment.get("uploadedAt") or utcnow(),
            }
        ).model_dump(mode="json", exclude_none=True)
