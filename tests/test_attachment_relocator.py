from __future__ import annotations

import pytest

from bridal_rentals.domain.attachments import AttachmentRelocator
from bridal_rentals.infrastructure.storage import InMemoryBlobStore

from tests.fixtures.failing_blob_store import FailingUploadBlobStore


@pytest.mark.anyio
async def test_attachment_outside_approvals_is_returned_unchanged() -> None:
    store = InMemoryBlobStore()
    relocator = AttachmentRelocator(store)
    attachment = {"name": "id.pdf", "url": store.url_for("uploads/customers/documents/id.pdf")}

    result = await relocator.relocate(attachment, "customer", trace_id="t")

    assert result is attachment
    assert await store.list("") == []


@pytest.mark.anyio
async def test_pending_upload_is_moved_to_resource_folder() -> None:
    # Arrange
    store = InMemoryBlobStore()
    await store.put("approvals/receipt.pdf", b"%PDF-1.7", "application/pdf")
    relocator = AttachmentRelocator(store)
    attachment = {"name": "receipt.pdf", "url": store.url_for("approvals/receipt.pdf")}

    # Act
    result = await relocator.relocate(attachment, "payment", trace_id="t")

    # Assert
    assert result["url"].startswith(store.url_for("uploads/payment/"))
    assert result["url"].endswith("-receipt.pdf")
    assert result["link"] == result["url"]
    assert result["size"] == len(b"%PDF-1.7")
    assert result["type"] == "document"
    assert result["uploadedAt"]
    assert store.exists("approvals/receipt.pdf")

    await relocator.commit(trace_id="t")

    assert not store.exists("approvals/receipt.pdf")
    assert await store.download(result["url"]) == b"%PDF-1.7"


@pytest.mark.anyio
async def test_pending_upload_matched_by_encoded_filename() -> None:
    store = InMemoryBlobStore()
    await store.put("approvals/wedding photo.jpg", b"jpeg", "image/jpeg")
    relocator = AttachmentRelocator(store)

    result = await relocator.relocate(
        {"url": "https://elsewhere.example/approvals/wedding%20photo.jpg"},
        "customer",
        trace_id="t",
    )

    assert "/uploads/customers/images/" in result["url"]
    assert result["name"] == "wedding photo.jpg"
    await relocator.commit(trace_id="t")
    assert not store.exists("approvals/wedding photo.jpg")


@pytest.mark.anyio
async def test_missing_blob_keeps_original_reference_with_backfill() -> None:
    store = InMemoryBlobStore()
    relocator = AttachmentRelocator(store)
    url = store.url_for("approvals/lost-invoice.pdf")

    result = await relocator.relocate({"url": url}, "cost", trace_id="t")

    assert result["url"] == url
    assert result["name"] == "lost-invoice.pdf"
    assert result["size"] == 0
    assert result["type"] == "document"
    assert result["uploadedAt"]
    assert "link" not in result


@pytest.mark.anyio
async def test_one_failure_does_not_stop_the_others() -> None:
    store = FailingUploadBlobStore()
    await InMemoryBlobStore.put(store, "approvals/a.png", b"png")
    relocator = AttachmentRelocator(store)

    results = await relocator.relocate_all(
        [
            {"url": store.url_for("approvals/a.png")},
            {"url": store.url_for("uploads/costs/b.png"), "name": "b.png"},
        ],
        "cost",
        trace_id="t",
    )

    assert results[0]["url"] == store.url_for("approvals/a.png")
    assert results[0]["size"] == 0
    assert results[1] == {"url": store.url_for("uploads/costs/b.png"), "name": "b.png"}


@pytest.mark.anyio
async def test_relocate_url_moves_bare_product_media() -> None:
    store = InMemoryBlobStore()
    await store.put("approvals/teaser.mp4", b"mp4", "video/mp4")
    relocator = AttachmentRelocator(store)

    new_url = await relocator.relocate_url(store.url_for("approvals/teaser.mp4"), "item", trace_id="t")

    assert new_url.startswith(store.url_for("uploads/products/videos/"))
    assert await relocator.relocate_url(new_url, "item", trace_id="t") == new_url


def test_is_pending_upload_honours_custom_prefix() -> None:
    relocator = AttachmentRelocator(InMemoryBlobStore(), approvals_prefix="/staging/")

    assert relocator.is_pending_upload("https://blob.local/staging/x.pdf")
    assert not relocator.is_pending_upload("https://blob.local/approvals/x.pdf")
    assert not relocator.is_pending_upload(None)


@pytest.mark.anyio
async def test_discard_removes_copies_and_keeps_staged_upload() -> None:
    store = InMemoryBlobStore()
    await store.put("approvals/receipt.pdf", b"%PDF-1.7", "application/pdf")
    relocator = AttachmentRelocator(store)

    result = await relocator.relocate({"url": store.url_for("approvals/receipt.pdf")}, "cost", trace_id="t")
    assert len(relocator.moves) == 1

    await relocator.discard(trace_id="t")

    assert store.exists("approvals/receipt.pdf")
    assert not await store.list("uploads/")
    assert relocator.moves == []
    # Nothing left to clean up afterwards
    await relocator.commit(trace_id="t")
    assert store.exists("approvals/receipt.pdf")
    assert result["url"] != store.url_for("approvals/receipt.pdf")


@pytest.mark.anyio
async def test_backfilled_attachment_is_normalised() -> None:
    store = InMemoryBlobStore()
    relocator = AttachmentRelocator(store)
    url = store.url_for("approvals/scan.jpeg")

    result = await relocator.relocate(
        {"url": url, "link": url, "type": "spreadsheet", "size": -3, "uploadedAt": "2025-05-01T09:30:00"},
        "customer",
        trace_id="t",
    )

    assert result["type"] == "image"
    assert result["size"] == 0
    assert result["link"] == url
    assert result["uploadedAt"] == "2025-05-01T09:30:00"
