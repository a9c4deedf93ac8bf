from fastapi import APIRouter, HTTPException, Depends, status

from bridal_rentals.api.core.auth import get_current_user, require_admin, require_manager
from bridal_rentals.api.dependencies import (
    get_approval_gate,
    get_approval_repo,
    get_review_service,
    get_user_repo,
)
from bridal_rentals.api.schemas import (
    ApprovalCreateIn,
    ApprovalEnvelope,
    ApprovalListQuery,
    ApprovalOut,
    CountOut,
    MessageOut,
    PaginatedResponse,
    PaginationMeta,
    ReviewIn,
)
from bridal_rentals.core.errors import (
    ApprovalAlreadyReviewedError,
    ApprovalExecutionError,
    ApprovalNotFoundError,
    InvalidApprovalRequestError,
    ResourceNotFoundError,
    UnsupportedResourceTypeError,
)
from bridal_rentals.domain.approval import DefaultApprovalGate, ReviewAction
from bridal_rentals.domain.approval.entities import (
    ApprovalFilters,
    ApprovalRequestEntity,
    Pagination,
    Sorting,
)
from bridal_rentals.domain.approval.repository import ApprovalRequestRepository
from bridal_rentals.domain.approval.review import ApprovalReviewService
from bridal_rentals.domain.policies import is_admin, is_manager
from bridal_rentals.domain.users import UserRepository
from bridal_rentals.infrastructure.db.models import User
from bridal_rentals.observability.tracing import log_event, new_trace_id

router = APIRouter(prefix="/approvals", tags=["Approvals"])


def _present(approvals: list[ApprovalRequestEntity], users: UserRepository) -> list[ApprovalOut]:
    refs = users.refs(
        [a.requested_by for a in approvals] + [a.reviewed_by for a in approvals]
    )
    return [ApprovalOut.from_entity(a, refs) for a in approvals]


@router.get(
    "",
    summary="List approval requests",
    description="Returns approval requests filtered by status, resource, requester, and pagination.",
    response_model=PaginatedResponse[ApprovalOut],
)
async def get_approvals(
    q: ApprovalListQuery = Depends(),
    _: User = Depends(require_manager),
    approval_repository: ApprovalRequestRepository = Depends(get_approval_repo),
    users: UserRepository = Depends(get_user_repo),
):
    """
    List approval requests with optional filters (admins and managers).

    Query Parameters:
    - status: Filter by approval status
    - resource_type / action_type: Filter by target
    - requested_by: Filter by requester
    - limit / offset: Pagination
    - sort_by / sort_order: Sorting
    """
    filters = ApprovalFilters(
        status=q.status.value if q.status else None,
        resource_type=q.resource_type.value if q.resource_type else None,
        action_type=q.action_type.value if q.action_type else None,
        requested_by=q.requested_by,
    )
    paging = Pagination(limit=q.limit, offset=q.offset)
    sorting = Sorting(sort_by=q.sort_by.value, sort_order=q.sort_order.value)

    page = approval_repository.get_all(
        filters=filters,
        paging=paging,
        sorting=sorting
    )

    return PaginatedResponse[ApprovalOut](
        data=_present(page.data, users),
        meta=PaginationMeta(
            total=page.meta.total,
            limit=page.meta.limit,
            offset=page.meta.offset,
            has_next=page.meta.has_next,
            has_previous=page.meta.has_previous,
        ),
    )


@router.post("", response_model=ApprovalEnvelope, status_code=status.HTTP_201_CREATED)
async def create_approval(
    payload: ApprovalCreateIn,
    user: User = Depends(get_current_user),
    gate: DefaultApprovalGate = Depends(get_approval_gate),
    users: UserRepository = Depends(get_user_repo),
):
    """Submit a change for review."""
    try:
        approval = gate.submit(
            requested_by=user.id,
            action_type=payload.action_type.value,
            resource_type=payload.resource_type.value,
            resource_id=payload.resource_id,
            original_data=payload.original_data,
            new_data=payload.new_data,
            reason=payload.reason,
        )
    except (InvalidApprovalRequestError, UnsupportedResourceTypeError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail="Resource not found")

    message = "Your request has been submitted for approval."
    if approval.action_type == "edit":
        message += f" {len(approval.new_data or {})} field(s) will be updated."
    return ApprovalEnvelope(message=message, approval=_present([approval], users)[0])


@router.get("/count", response_model=CountOut)
async def count_pending_approvals(
    user: User = Depends(get_current_user),
    approval_repository: ApprovalRequestRepository = Depends(get_approval_repo),
):
    """Pending approvals the caller can act on."""
    if not is_admin(user):
        return CountOut(count=0)
    return CountOut(count=approval_repository.count_pending())


@router.get("/my-requests", response_model=list[ApprovalOut])
async def get_my_requests(
    user: User = Depends(get_current_user),
    approval_repository: ApprovalRequestRepository = Depends(get_approval_repo),
    users: UserRepository = Depends(get_user_repo),
):
    """Approvals requested by the caller, newest first."""
    return _present(approval_repository.list_for_requester(user.id), users)


@router.get("/{approval_id}", response_model=ApprovalOut)
async def get_approval(
    approval_id: str,
    user: User = Depends(get_current_user),
    approval_repository: ApprovalRequestRepository = Depends(get_approval_repo),
    users: UserRepository = Depends(get_user_repo),
):
    """Get a specific approval."""
    result = approval_repository.get(approval_id)
    if not result:
        raise HTTPException(status_code=404, detail="Approval not found")
    if not is_manager(user) and result.requested_by != user.id:
        raise HTTPException(status_code=403, detail="Manager or Admin access required")
    return _present([result], users)[0]


@router.delete("/{approval_id}", response_model=MessageOut)
async def delete_approval(
    approval_id: str,
    _: User = Depends(require_admin),
    approval_repository: ApprovalRequestRepository = Depends(get_approval_repo),
):
    if not approval_repository.delete(approval_id):
        raise HTTPException(status_code=404, detail="Approval not found")
    return MessageOut(message="Approval deleted successfully")


@router.put("/{approval_id}/review", response_model=ApprovalEnvelope)
async def review_approval(
    approval_id: str,
    payload: ReviewIn,
    reviewer: User = Depends(require_admin),
    review_service: ApprovalReviewService = Depends(get_review_service),
    users: UserRepository = Depends(get_user_repo),
):
    """Approve (and apply) or reject a pending request."""
    try:
        approval = await review_service.review(
            approval_id=approval_id,
            action=payload.action,
            reviewer_id=reviewer.id,
            comment=payload.comment,
        )
    except ApprovalNotFoundError:
        raise HTTPException(status_code=404, detail="Approval not found")
    except ApprovalAlreadyReviewedError:
        raise HTTPException(status_code=400, detail="Approval already reviewed")
    except ApprovalExecutionError:
        raise HTTPException(status_code=500, detail="Failed to execute approved action")
    except Exception as exc:
        log_event("approval.review_failed", trace_id=new_trace_id(), approval_id=approval_id, error=str(exc))
        raise HTTPException(status_code=500, detail="Failed to review approval")

    if payload.action == ReviewAction.APPROVE:
        message = "Request has been approved and executed"
    else:
        message = "Request has been rejected"
    return ApprovalEnvelope(message=message, approval=_present([approval], users)[0])
