from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class BlobInfo:
    url: str
    pathname: str
    size: int = 0
    content_type: str | None = None
    uploaded_at: datetime | None = None


class BlobStore(Protocol):
    async def list(self, prefix: str) -> list[BlobInfo]:
        ...

    async def put(self, pathname: str, content: bytes, content_type: str | None = None) -> BlobInfo:
        ...

    async def delete(self, url: str) -> None:
        ...

    async def download(self, url: str) -> bytes:
        ...
