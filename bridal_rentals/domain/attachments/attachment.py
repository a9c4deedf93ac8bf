from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from pydantic import BaseModel, Field

class FileType(str, Enum):
    IMAGE = "image"
    DOCUMENT = "document"
    VIDEO = "video"
    AUDIO = "audio"
    OTHER = "other"


_EXTENSIONS: dict[FileType, set[str]] = {
    FileType.IMAGE: {"jpg", "jpeg", "png", "gif", "bmp", "webp", "svg", "ico"},
    FileType.DOCUMENT: {"pdf", "doc", "docx", "txt", "rtf", "xls", "xlsx", "ppt", "pptx"},
    FileType.VIDEO: {"mp4", "avi", "mov", "wmv", "flv", "webm", "mkv"},
    FileType.AUDIO: {"mp3", "wav", "aac", "ogg", "wma", "m4a"},
}


class Attachment(BaseModel):
    """Stored shape of a file attached to a customer, payment, cost, ..."""

    name: str = Field(min_length=1)
    size: int = Field(ge=0)
    url: str = Field(min_length=1)
    type: FileType = FileType.OTHER
    uploadedAt: datetime | None = None
    uploadedBy: str | None = None
    # Same as url; older screens read it under this name
    link: str | None = None


def file_type_from_extension(filename: str) -> FileType:
    extension = PurePosixPath(filename).suffix.lstrip(".").lower()
    for file_type, extensions in _EXTENSIONS.items():
        if extension in extensions:
            return file_type
    return FileType.OTHER


def filename_from_url(url: str) -> str:
    """Last path segment of a url, percent-decoded."""
    path = urlparse(url).path or url
    return unquote(path.rstrip("/").rsplit("/", 1)[-1])

