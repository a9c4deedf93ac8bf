from datetime import datetime

from bridal_rentals.core.clock import utcnow
from bridal_rentals.core.errors import BlobStorageError

from .blob_store import BlobInfo


class InMemoryBlobStore:
    """
    BlobStore kept in process memory.

    Public urls have the form ``<base_url>/<pathname>``.
    """

    def __init__(self, base_url: str = "https://blob.local") -> None:
        self._base_url = base_url.rstrip("/")
        self._blobs: dict[str, tuple[bytes, str | None, datetime]] = {}

    def url_for(self, pathname: str) -> str:
        return f"{self._base_url}/{pathname}"

    def _pathname_for(self, url: str) -> str:
        prefix = f"{self._base_url}/"
        if not url.startswith(prefix):
            raise BlobStorageError(f"Url is not served by this store: {url}")
        return url[len(prefix):]

    def _info(self, pathname: str) -> BlobInfo:
        content, content_type, uploaded_at = self._blobs[pathname]
        return BlobInfo(
            url=self.url_for(pathname),
            pathname=pathname,
            size=len(content),
            content_type=content_type,
            uploaded_at=uploaded_at,
        )

    def exists(self, pathname: str) -> bool:
        return pathname in self._blobs

    async def list(self, prefix: str) -> list[BlobInfo]:
        return [self._info(p) for p in sorted(self._blobs) if p.startswith(prefix)]

    async def put(self, pathname: str, content: bytes, content_type: str | None = None) -> BlobInfo:
        self._blobs[pathname] = (content, content_type, utcnow())
        return self._info(pathname)

    async def delete(self, url: str) -> None:
        self._blobs.pop(self._pathname_for(url), None)

    async def download(self, url: str) -> bytes:
        pathname = self._pathname_for(url)
        if pathname not in self._blobs:
            raise BlobStorageError(f"Blob not found: {pathname}")
        return self._blobs[pathname][0]
