from __future__ import annotations

from typing import Any

from bridal_rentals.domain.attachments import AttachmentRelocator
from bridal_rentals.domain.resources import (
    ResourceRepository,
    normalize_reservation_fields,
    update_reservation_payment_status,
)
from bridal_rentals.infrastructure.storage import BlobStore
from bridal_rentals.observability.tracing import log_event

from .entities import ApprovalRequestEntity
from .models import ActionType, ResourceType

# Form-only keys that describe attachment changes rather than columns
_ATTACHMENT_KEYS = ("attachments", "newFiles", "deletedAttachments", "existingAttachments")
_MERGED_ATTACHMENT_RESOURCES = {ResourceType.PAYMENT.value, ResourceType.COST.value}
_ATTACHMENT_RESOURCES = _MERGED_ATTACHMENT_RESOURCES | {ResourceType.CUSTOMER.value}


def _url_of(attachment: Any) -> str | None:
    if isinstance(attachment, dict):
        return attachment.get("url") or attachment.get("link")
    if isinstance(attachment, str):
        return attachment
    return None


class ActionExecutor:
    """
    Applies a create/edit/delete to the resource collections.

    Used both when an admin approves a request and when a user who needs
    no approval changes a resource directly, so the two paths can't drift.

    Responsibilities:
    - Relocate approval-time uploads before anything is written
    - Write only the fields the request carries
    - Keep reservation payment status in line with its payments
    - Save the resource and its payment status in a single commit

    Non-responsibilities:
    - Permission checks
    - Approval status bookkeeping
    """

    def __init__(
        self,
        *,
        resources: ResourceRepository,
        relocator: AttachmentRelocator,
        blob_store: BlobStore | None = None,
    ) -> None:
        self._resources = resources
        self._relocator = relocator
        self._blob_store = blob_store

    async def execute(self, approval: ApprovalRequestEntity, *, trace_id: str) -> dict[str, Any]:
        """Replay the mutation recorded in an approval request."""
        return await self.apply(
            action_type=approval.action_type,
            resource_type=approval.resource_type,
            resource_id=approval.resource_id,
            data=approval.new_data or {},
            acting_user=approval.requested_by,
            trace_id=trace_id,
        )

    async def apply(
        self,
        *,
        action_type: str,
        resource_type: str,
        resource_id: str | None,
        data: dict[str, Any],
        acting_user: str,
        trace_id: str,
    ) -> dict[str, Any]:
        # Raises UnsupportedResourceTypeError before anything is touched
        self._resources.model_for(resource_type)

        try:
            if action_type == ActionType.DELETE.value:
                result, removed = await self._delete(resource_type, resource_id, trace_id=trace_id)
            elif action_type == ActionType.EDIT.value:
                result, removed = await self._edit(resource_type, resource_id, data, trace_id=trace_id)
            elif action_type == ActionType.CREATE.value:
                result, removed = await self._create(resource_type, data, acting_user, trace_id=trace_id)
            else:
                raise ValueError(f"Unsupported action type: {action_type}")
            self._resources.commit()
        except Exception:
            # Nothing was saved, so copies made for this change have no owner
            self._resources.rollback()
            await self._relocator.discard(trace_id=trace_id)
            raise

        # Staged originals and dropped attachments go only once the write is saved
        await self._relocator.commit(trace_id=trace_id)
        await self._discard_blobs(removed, trace_id=trace_id)
        return result

    # -------------------------
    # ACTIONS
    # -------------------------
    # Each action returns the saved resource and the attachments it dropped
    async def _delete(self, resource_type: str, resource_id: str | None, *, trace_id: str) -> tuple[dict, list]:
        row = self._resources.get_or_raise(resource_type, resource_id)
        reservation_id = row.reservation if resource_type == ResourceType.PAYMENT.value else None

        snapshot = self._resources.delete(resource_type, resource_id)
        log_event("resource.deleted", trace_id=trace_id, resource_type=resource_type, resource_id=resource_id)

        if reservation_id:
            self._refresh_payment_status(reservation_id, trace_id=trace_id)
        return snapshot, []

    async def _edit(
        self,
        resource_type: str,
        resource_id: str | None,
        data: dict[str, Any],
        *,
        trace_id: str,
    ) -> tuple[dict, list]:
        row = self._resources.get_or_raise(resource_type, resource_id)
        if not data:
            return row.to_dict(), []

        previous_reservation = row.reservation if resource_type == ResourceType.PAYMENT.value else None
        fields, removed = await self._prepare(resource_type, data, row.to_dict(), trace_id=trace_id)
        if not fields:
            return row.to_dict(), []

        updated = self._resources.update_fields(resource_type, resource_id, fields)
        log_event(
            "resource.updated",
            trace_id=trace_id,
            resource_type=resource_type,
            resource_id=resource_id,
            fields=sorted(fields),
        )

        if resource_type == ResourceType.PAYMENT.value:
            for reservation_id in {previous_reservation, updated.reservation}:
                if reservation_id:
                    self._refresh_payment_status(reservation_id, trace_id=trace_id)
        elif resource_type == ResourceType.RESERVATION.value and "total" in fields:
            self._refresh_payment_status(updated.id, trace_id=trace_id)

        return self._resources.get_or_raise(resource_type, resource_id).to_dict(), removed

    async def _create(
        self,
        resource_type: str,
        data: dict[str, Any],
        acting_user: str,
        *,
        trace_id: str,
    ) -> tuple[dict, list]:
        fields, _ = await self._prepare(resource_type, data, None, trace_id=trace_id)
        row = self._resources.create(resource_type, fields, created_by=acting_user)
        log_event("resource.created", trace_id=trace_id, resource_type=resource_type, resource_id=row.id)

        if resource_type == ResourceType.PAYMENT.value and row.reservation:
            self._refresh_payment_status(row.reservation, trace_id=trace_id)
        return self._resources.get_or_raise(resource_type, row.id).to_dict(), []

    # -------------------------
    # FIELD PREPARATION
    # -------------------------
    async def _prepare(
        self,
        resource_type: str,
        data: dict[str, Any],
        current: dict[str, Any] | None,
        *,
        trace_id: str,
    ) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        """Return the column-bound fields to write and the attachments being dropped."""
        fields = {k: v for k, v in data.items() if k not in _ATTACHMENT_KEYS}
        removed: list[dict[str, Any]] = []

        if resource_type in _ATTACHMENT_RESOURCES and any(k in data for k in _ATTACHMENT_KEYS):
            fields["attachments"], removed = await self._attachments(resource_type, data, current, trace_id=trace_id)

        if resource_type == ResourceType.ITEM.value:
            await self._relocate_product_media(fields, trace_id=trace_id)
        elif resource_type == ResourceType.RESERVATION.value:
            fields = normalize_reservation_fields(fields)
        elif resource_type == ResourceType.PAYMENT.value:
            payment_time = fields.pop("paymentTime", None)
            payment_date = fields.get("paymentDate")
            if payment_time and isinstance(payment_date, str) and "T" not in payment_date:
                fields["paymentDate"] = f"{payment_date}T{payment_time}"

        return fields, removed

    async def _attachments(
        self,
        resource_type: str,
        data: dict[str, Any],
        current: dict[str, Any] | None,
        *,
        trace_id: str,
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        incoming = [
            a for a in list(data.get("attachments") or []) + list(data.get("newFiles") or [])
            if _url_of(a)
        ]

        if current is None:
            return await self._relocator.relocate_all(incoming, resource_type, trace_id=trace_id), []

        # Customers send their full list; payments and costs send only the delta
        if resource_type not in _MERGED_ATTACHMENT_RESOURCES and "attachments" in data:
            return await self._relocator.relocate_all(incoming, resource_type, trace_id=trace_id), []

        base = list(current.get("attachments") or [])
        deleted_urls = {_url_of(a) for a in data.get("deletedAttachments") or []}
        kept = [a for a in base if _url_of(a) not in deleted_urls]
        removed = [a for a in base if _url_of(a) in deleted_urls]

        known = {_url_of(a) for a in kept}
        fresh = [a for a in incoming if _url_of(a) not in known]
        relocated = await self._relocator.relocate_all(fresh, resource_type, trace_id=trace_id)
        return kept + relocated, removed

    async def _relocate_product_media(self, fields: dict[str, Any], *, trace_id: str) -> None:
        item = ResourceType.ITEM.value
        if isinstance(fields.get("primaryPhoto"), str):
            fields["primaryPhoto"] = await self._relocator.relocate_url(
                fields["primaryPhoto"], item, trace_id=trace_id
            )
        for key in ("secondaryImages", "videoUrls"):
            if isinstance(fields.get(key), list):
                fields[key] = [
                    _url_of(v) for v in await self._relocator.relocate_all(fields[key], item, trace_id=trace_id)
                ]

    # -------------------------
    # SIDE EFFECTS
    # -------------------------
    def _refresh_payment_status(self, reservation_id: str, *, trace_id: str) -> None:
        if self._resources.get("reservation", reservation_id) is None:
            log_event("reservation.payment_status.skipped", trace_id=trace_id, reservation_id=reservation_id)
            return
        calculation = update_reservation_payment_status(self._resources, reservation_id)
        log_event(
            "reservation.payment_status.updated",
            trace_id=trace_id,
            reservation_id=reservation_id,
            payment_status=calculation.payment_status,
            remaining_balance=calculation.remaining_balance,
        )

    async def _discard_blobs(self, attachments: list[dict[str, Any]], *, trace_id: str) -> None:
        if self._blob_store is None:
            return
        for attachment in attachments:
            url = _url_of(attachment)
            if not url:
                continue
            try:
                await self._blob_store.delete(url)
            except Exception as exc:
                log_event("attachment.delete_failed", trace_id=trace_id, url=url, error=str(exc))
