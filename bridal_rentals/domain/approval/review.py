from bridal_rentals.core.errors import (
    ApprovalAlreadyReviewedError,
    ApprovalExecutionError,
    ApprovalNotFoundError,
)
from bridal_rentals.observability.tracing import Span, log_event, new_trace_id

from .entities import ApprovalRequestEntity
from .executor import ActionExecutor
from .models import ApprovalStatus, ReviewAction
from .repository import ApprovalRequestRepository


class ApprovalReviewService:
    """
    Moves a pending approval to approved or rejected.

    Approving replays the recorded action. If that fails, the approval goes
    back to pending with no reviewer recorded, so an approved request always
    means the change was applied.
    """

    def __init__(self, *, approvals: ApprovalRequestRepository, executor: ActionExecutor) -> None:
        self._approvals = approvals
        self._executor = executor

    async def review(
        self,
        *,
        approval_id: str,
        action: ReviewAction,
        reviewer_id: str,
        comment: str | None = None,
    ) -> ApprovalRequestEntity:
        trace_id = new_trace_id()

        approval = self._approvals.get(approval_id)
        if approval is None:
            raise ApprovalNotFoundError(approval_id)
        if approval.status != ApprovalStatus.PENDING.value:
            raise ApprovalAlreadyReviewedError(approval_id, approval.status)

        if action == ReviewAction.REJECT:
            if not self._approvals.mark_rejected(approval_id, reviewer_id, comment):
                raise ApprovalAlreadyReviewedError(approval_id, self._current_status(approval_id))
            log_event("approval.rejected", trace_id=trace_id, approval_id=approval_id, reviewed_by=reviewer_id)
            return self._approvals.get(approval_id)

        if not self._approvals.mark_approved(approval_id, reviewer_id, comment):
            raise ApprovalAlreadyReviewedError(approval_id, self._current_status(approval_id))

        log_event(
            "approval.approved",
            trace_id=trace_id,
            approval_id=approval_id,
            action_type=approval.action_type,
            resource_type=approval.resource_type,
            resource_id=approval.resource_id,
            reviewed_by=reviewer_id,
        )

        span = Span(name="approval.execute", trace_id=trace_id, attributes={"approval_id": approval_id})
        try:
            await self._executor.execute(approval, trace_id=trace_id)
        except Exception as exc:
            span.finish("failed")
            log_event(
                "approval.execution_failed",
                trace_id=trace_id,
                span=span,
                approval_id=approval_id,
                error=f"{type(exc).__name__}: {exc}",
            )
            self._approvals.revert_to_pending(approval_id)
            log_event("approval.reverted", trace_id=trace_id, approval_id=approval_id)
            raise ApprovalExecutionError(f"Failed to execute approved action: {exc}") from exc

        span.finish("applied")
        log_event("approval.executed", trace_id=trace_id, span=span)
        return self._approvals.get(approval_id)

    def _current_status(self, approval_id: str) -> str:
        approval = self._approvals.get(approval_id)
        return approval.status if approval else "deleted"
