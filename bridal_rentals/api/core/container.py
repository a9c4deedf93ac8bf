# --------------------------------
# DI container
# --------------------------------
from functools import lru_cache

from bridal_rentals.config import Settings, settings
from bridal_rentals.infrastructure.storage import BlobStore, HttpBlobStore, InMemoryBlobStore


def build_blob_store(config: Settings) -> BlobStore:
    if config.blob_backend == "vercel":
        return HttpBlobStore(
            base_url=config.blob_base_url,
            token=config.blob_read_write_token,
            timeout=config.blob_timeout_seconds,
        )
    return InMemoryBlobStore()


class Container:
    def __init__(self, config: Settings = settings):
        self._settings = config
        self._blob_store = build_blob_store(config)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def blob_store(self) -> BlobStore:
        return self._blob_store


@lru_cache
def get_container():
    return Container()
