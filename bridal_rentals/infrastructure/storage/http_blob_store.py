"""Blob store backed by the Vercel Blob REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from bridal_rentals.core.errors import BlobStorageError

from .blob_store import BlobInfo

_API_VERSION = "7"


class HttpBlobStore:
    """Talk to a Vercel-style blob service over HTTP.

    - ``GET  <base>?prefix=..`` lists blobs (cursor paginated)
    - ``PUT  <base>/<pathname>`` uploads a public blob
    - ``POST <base>/delete`` removes blobs by url
    - blob urls are public, so downloads are plain ``GET`` requests
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 120.0,
    ) -> None:
        """Create an HTTP blob store.

        Args:
            base_url: Blob API root (e.g. https://blob.vercel-storage.com).
            token: Read/write token sent as a bearer token.
            client: Optional injected httpx client for testing / transport control.
            timeout: Per-request timeout in seconds.
        """
        if not token:
            raise BlobStorageError("Blob read/write token is not configured")
        self._base_url = base_url.rstrip('/')
        self._token = token
        self._client = client
        self._timeout = timeout

    def _headers(self, **extra: str) -> dict[str, str]:
        return {
            'authorization': f'Bearer {self._token}',
            'x-api-version': _API_VERSION,
            **extra,
        }

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            if self._client is not None:
                resp = await self._client.request(method, url, timeout=self._timeout, **kwargs)
                resp.raise_for_status()
                return resp

            async with httpx.AsyncClient() as client:
                resp = await client.request(method, url, timeout=self._timeout, **kwargs)
                resp.raise_for_status()
                return resp
        except httpx.HTTPError as exc:
            raise BlobStorageError(f'{method} {url} failed: {exc}') from exc

    async def list(self, prefix: str) -> list[BlobInfo]:
        blobs: list[BlobInfo] = []
        cursor: str | None = None

        while True:
            params = {'prefix': prefix}
            if cursor:
                params['cursor'] = cursor
            resp = await self._request('GET', self._base_url, params=params, headers=self._headers())
            body = resp.json()
            blobs.extend(self._to_info(b) for b in body.get('blobs', []))
            if not body.get('hasMore'):
                return blobs
            cursor = body.get('cursor')

    async def put(self, pathname: str, content: bytes, content_type: str | None = None) -> BlobInfo:
        headers = self._headers(**{'x-add-random-suffix': '0'})
        if content_type:
            headers['x-content-type'] = content_type
        url = f"{self._base_url}/{quote(pathname, safe='/')}"
        resp = await self._request('PUT', url, content=content, headers=headers)
        body = resp.json()
        return BlobInfo(
            url=body['url'],
            pathname=body.get('pathname', pathname),
            size=len(content),
            content_type=body.get('contentType', content_type),
        )

    async def delete(self, url: str) -> None:
        await self._request(
            'POST',
            f'{self._base_url}/delete',
            json={'urls': [url]},
            headers=self._headers(),
        )

    async def download(self, url: str) -> bytes:
        resp = await self._request('GET', url)
        return resp.content

    @staticmethod
    def _to_info(raw: dict[str, Any]) -> BlobInfo:
        uploaded_at = raw.get('uploadedAt')
        return BlobInfo(
            url=raw['url'],
            pathname=raw['pathname'],
            size=int(raw.get('size') or 0),
            content_type=raw.get('contentType'),
            uploaded_at=datetime.fromisoformat(uploaded_at.replace('Z', '+00:00')) if uploaded_at else None,
        )
