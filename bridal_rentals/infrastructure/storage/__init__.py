"""This module handles blob storage for uploaded attachments."""
from .blob_store import BlobInfo, BlobStore
from .in_memory_blob_store import InMemoryBlobStore
from .http_blob_store import HttpBlobStore
