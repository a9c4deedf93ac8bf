from typing import Any, Protocol

from bridal_rentals.core.errors import InvalidApprovalRequestError
from bridal_rentals.domain.policies import needs_approval
from bridal_rentals.domain.resources import ResourceRepository
from bridal_rentals.infrastructure.db.models import User

from .entities import ApprovalGateResult, ApprovalRequestEntity
from .models import ActionType
from .repository import ApprovalRequestRepositoryProtocol


class ApprovalGate(Protocol):
    def evaluate(
        self,
        *,
        user: User,
        action_type: str,
        resource_type: str,
        resource_id: str | None,
        new_data: dict[str, Any] | None,
        reason: str | None = None,
    ) -> ApprovalGateResult:
        ...


class DefaultApprovalGate:
    """
    Default approval gate using ApprovalRequestRepository.

    Lets privileged users through and turns every other mutation into a
    pending approval request.
    """

    def __init__(
        self,
        approval_repository: ApprovalRequestRepositoryProtocol,
        resources: ResourceRepository,
    ) -> None:
        self._repo = approval_repository
        self._resources = resources

    def evaluate(
        self,
        *,
        user: User,
        action_type: str,
        resource_type: str,
        resource_id: str | None,
        new_data: dict[str, Any] | None,
        reason: str | None = None,
    ) -> ApprovalGateResult:
        if not needs_approval(user, action_type, resource_type):
            return ApprovalGateResult(proceed=True)

        approval = self.submit(
            requested_by=user.id,
            action_type=action_type,
            resource_type=resource_type,
            resource_id=resource_id,
            original_data=None,
            new_data=new_data,
            reason=reason or f"Request to {action_type} {resource_type}",
        )

        return ApprovalGateResult(
            proceed=False,
            response={
                "status": "approval_required",
                "approvalId": approval.id,
                "actionType": action_type,
                "resourceType": resource_type,
            },
        )

    def submit(
        self,
        *,
        requested_by: str,
        action_type: str,
        resource_type: str,
        resource_id: str | None,
        original_data: dict[str, Any] | None,
        new_data: dict[str, Any] | None,
        reason: str | None,
    ) -> ApprovalRequestEntity:
        """Validate and store a pending approval request."""
        # Raises UnsupportedResourceTypeError for unknown kinds
        self._resources.model_for(resource_type)

        if action_type in (ActionType.EDIT.value, ActionType.DELETE.value) and not resource_id:
            raise InvalidApprovalRequestError(f"resourceId is required to {action_type} a {resource_type}")

        if action_type in (ActionType.EDIT.value, ActionType.CREATE.value) and not new_data:
            raise InvalidApprovalRequestError("No changes detected to approve")

        if original_data is None:
            original_data = self._resources.snapshot(resource_type, resource_id) if resource_id else {}

        return self._repo.create_pending(
            requested_by=requested_by,
            action_type=action_type,
            resource_type=resource_type,
            resource_id=resource_id,
            original_data=original_data,
            new_data=new_data if action_type != ActionType.DELETE.value else None,
            reason=reason,
        )
