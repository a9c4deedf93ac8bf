# ============================================================
# DB access layer
# ============================================================
from typing import Protocol, Any

from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import Session

from bridal_rentals.core.clock import utcnow
from bridal_rentals.infrastructure.db.models import ApprovalRequest as ApprovalRequestRow
from bridal_rentals.domain.approval.models import ApprovalStatus
from bridal_rentals.domain.approval.entities import (
    ApprovalRequestEntity as ApprovalRequest,
    ApprovalFilters,
    Pagination,
    Sorting,
    PageResult,
    PageMeta,
)


class ApprovalRequestRepositoryProtocol(Protocol):
    def create_pending(
            self,
            *,
            requested_by: str,
            action_type: str,
            resource_type: str,
            resource_id: str | None,
            original_data: dict[str, Any],
            new_data: dict[str, Any] | None,
            reason: str | None,
    ) -> ApprovalRequest:
        """Create a new pending approval"""
        ...

    def get(self, approval_id: str) -> ApprovalRequest | None:
        """Get an approval by id"""
        ...

    def mark_approved(self, approval_id: str, approved_by: str, comment: str | None = None) -> bool:
        """Mark a pending approval as approved"""
        ...

    def mark_rejected(self, approval_id: str, rejected_by: str, comment: str | None = None) -> bool:
        """Mark a pending approval as rejected"""
        ...

    def revert_to_pending(self, approval_id: str) -> None:
        """Undo a review whose action could not be executed"""
        ...


class ApprovalRequestRepository(ApprovalRequestRepositoryProtocol):
    # Allowed sort columns at persistence layer
    _SORT_COLUMNS = {
        "created_at": ApprovalRequestRow.created_at,
        "status": ApprovalRequestRow.status,
        "resource_type": ApprovalRequestRow.resource_type,
    }

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_entity(row: ApprovalRequestRow) -> ApprovalRequest:
        return ApprovalRequest(
            id=row.id,
            requested_by=row.requested_by,
            action_type=row.action_type,
            resource_type=row.resource_type,
            resource_id=row.resource_id,
            original_data=row.original_data or {},
            new_data=row.new_data,
            reason=row.reason,
            status=row.status,
            reviewed_by=row.reviewed_by,
            reviewed_at=row.reviewed_at,
            review_comment=row.review_comment,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def create_pending(
            self,
            *,
            requested_by: str,
            action_type: str,
            resource_type: str,
            resource_id: str | None,
            original_data: dict[str, Any],
            new_data: dict[str, Any] | None,
            reason: str | None,
    ) -> ApprovalRequest:
        """Create a new pending approval"""
        row = ApprovalRequestRow(
            requested_by=requested_by,
            action_type=action_type,
            resource_type=resource_type,
            resource_id=resource_id,
            original_data=original_data,
            new_data=new_data,
            reason=reason,
            status=ApprovalStatus.PENDING.value,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._to_entity(row)

    def get(self, approval_id: str) -> ApprovalRequest | None:
        """Get an approval by id"""
        row = self.db.get(ApprovalRequestRow, approval_id)
        if row is None:
            return None
        # Always read the committed state, never a stale identity-map copy
        self.db.refresh(row)
        return self._to_entity(row)

    def _mark_reviewed(
            self,
            approval_id: str,
            status: ApprovalStatus,
            reviewed_by: str,
            comment: str | None,
    ) -> bool:
        # Compare-and-set: only one reviewer can move a request out of pending
        query = (
            update(ApprovalRequestRow)
            .where(
                ApprovalRequestRow.id == approval_id,
                ApprovalRequestRow.status == ApprovalStatus.PENDING.value,
            )
            .values(
                status=status.value,
                reviewed_by=reviewed_by,
                reviewed_at=utcnow(),
                review_comment=comment,
                updated_at=utcnow(),
            )
        )
        result = self.db.execute(query)
        self.db.commit()
        return result.rowcount == 1

    def mark_approved(self, approval_id: str, approved_by: str, comment: str | None = None) -> bool:
        """Mark a pending approval as approved"""
        return self._mark_reviewed(approval_id, ApprovalStatus.APPROVED, approved_by, comment)

    def mark_rejected(self, approval_id: str, rejected_by: str, comment: str | None = None) -> bool:
        """Mark a pending approval as rejected"""
        return self._mark_reviewed(approval_id, ApprovalStatus.REJECTED, rejected_by, comment)

    def revert_to_pending(self, approval_id: str) -> None:
        """Undo a review whose action could not be executed"""
        # Drop whatever the failed action left in the session first
        self.db.rollback()
        query = (
            update(ApprovalRequestRow)
            .where(ApprovalRequestRow.id == approval_id)
            .values(
                status=ApprovalStatus.PENDING.value,
                reviewed_by=None,
                reviewed_at=None,
                review_comment=None,
                updated_at=utcnow(),
            )
        )
        self.db.execute(query)
        self.db.commit()

    def delete(self, approval_id: str) -> bool:
        result = self.db.execute(
            delete(ApprovalRequestRow).where(ApprovalRequestRow.id == approval_id)
        )
        self.db.commit()
        return result.rowcount == 1

    def count_pending(self) -> int:
        query = (
            select(func.count())
            .select_from(ApprovalRequestRow)
            .where(ApprovalRequestRow.status == ApprovalStatus.PENDING.value)
        )
        return int(self.db.execute(query).scalar_one())

    def list_for_requester(self, user_id: str) -> list[ApprovalRequest]:
        query = (
            select(ApprovalRequestRow)
            .where(ApprovalRequestRow.requested_by == user_id)
            .order_by(ApprovalRequestRow.created_at.desc())
        )
        return [self._to_entity(row) for row in self.db.scalars(query)]

    def get_all(
            self,
            filters: ApprovalFilters,
            paging: Pagination,
            sorting: Sorting
    ) -> PageResult:
        """
        Retrieve approval requests matching the given filters.

        All filters are optional.
        Pagination is always applied.
        """
        conditions = []

        # --- Filters ---
        if filters.status:
            conditions.append(ApprovalRequestRow.status == filters.status)

        if filters.resource_type:
            conditions.append(ApprovalRequestRow.resource_type == filters.resource_type)

        if filters.action_type:
            conditions.append(ApprovalRequestRow.action_type == filters.action_type)

        if filters.requested_by:
            conditions.append(ApprovalRequestRow.requested_by == filters.requested_by)

        # --- Total Count ---
        count_query = select(func.count()).select_from(ApprovalRequestRow)
        if conditions:
            count_query = count_query.where(*conditions)
        total = int(self.db.execute(count_query).scalar_one())

        # ORDER BY: allow-list mapping only
        sort_col = self._SORT_COLUMNS.get(sorting.sort_by, ApprovalRequestRow.created_at)
        order_clause = sort_col.asc() if sorting.sort_order == "asc" else sort_col.desc()

        # --- Data Query ---
        data_query = (
            select(ApprovalRequestRow)
            .order_by(order_clause)
            .limit(paging.limit)
            .offset(paging.offset)
        )
        if conditions:
            data_query = data_query.where(*conditions)
        records = [self._to_entity(row) for row in self.db.scalars(data_query)]

        # --- Pagination Metadata ---
        meta = PageMeta(
            total=total,
            limit=paging.limit,
            offset=paging.offset,
            has_next=(paging.offset + paging.limit) < total,
            has_previous=paging.offset > 0,
        )

        return PageResult(
            data=records,
            meta=meta
        )
