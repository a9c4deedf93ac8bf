import pytest

from bridal_rentals.domain.attachments import (
    FileType,
    destination_folder,
    file_type_from_extension,
    filename_from_url,
)


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("veil.JPG", FileType.IMAGE),
        ("contract.pdf", FileType.DOCUMENT),
        ("fitting.mov", FileType.VIDEO),
        ("vows.m4a", FileType.AUDIO),
        ("archive.zip", FileType.OTHER),
        ("no-extension", FileType.OTHER),
    ],
)
def test_file_type_from_extension(filename: str, expected: FileType) -> None:
    assert file_type_from_extension(filename) == expected


@pytest.mark.parametrize(
    "resource_type, file_type, folder",
    [
        ("customer", FileType.IMAGE, "uploads/customers/images"),
        ("customer", FileType.VIDEO, "uploads/customers/documents"),
        ("customer", FileType.DOCUMENT, "uploads/customers/documents"),
        ("item", FileType.IMAGE, "uploads/products/images"),
        ("item", FileType.VIDEO, "uploads/products/videos"),
        ("item", FileType.OTHER, "uploads/products/documents"),
        ("payment", FileType.IMAGE, "uploads/payment"),
        ("reservation", FileType.DOCUMENT, "uploads/reservations"),
        ("cost", FileType.VIDEO, "uploads/costs"),
    ],
)
def test_destination_folder(resource_type: str, file_type: FileType, folder: str) -> None:
    assert destination_folder(resource_type, file_type) == folder


def test_filename_from_url_decodes_last_segment() -> None:
    url = "https://blob.local/approvals/1717-receipt%20may.pdf?download=1"

    assert filename_from_url(url) == "1717-receipt may.pdf"

