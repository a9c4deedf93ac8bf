"""This module handles file attachments owned by resources."""
from .attachment import (
    Attachment,
    FileType,
    file_type_from_extension,
    filename_from_url,
)
from .relocator import AttachmentRelocator, destination_folder
