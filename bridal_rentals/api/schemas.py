from typing import Optional, Generic, List, TypeVar, Any
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bridal_rentals.domain.approval.models import (
    ActionType,
    ApprovalStatus,
    ResourceType,
    ReviewAction,
)
from bridal_rentals.domain.approval.entities import ApprovalRequestEntity, UserRef


class CamelModel(BaseModel):
    """Accepts and emits the camelCase keys the admin UI uses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class ApprovalSortField(str, Enum):
    created_at = "created_at"
    status = "status"
    resource_type = "resource_type"


class ApprovalListQuery(BaseModel):
    """
    Query filters for listing approval requests.

    All fields are optional.
    """

    # Filtering
    status: Optional[ApprovalStatus] = Field(
        default=None,
        description="Filter approvals by status"
    )

    resource_type: Optional[ResourceType] = Field(
        default=None,
        description="Filter by the kind of resource the request targets"
    )

    action_type: Optional[ActionType] = Field(
        default=None,
        description="Filter by requested action"
    )

    requested_by: Optional[str] = Field(
        default=None,
        description="User who requested the approval"
    )

    # Pagination
    limit: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Maximum number of records to return (1-100)"
    )

    offset: int = Field(
        default=0,
        ge=0,
        description="Number of records to skip (pagination)"
    )

    # Sorting
    sort_by: ApprovalSortField = Field(
        default=ApprovalSortField.created_at,
        description="Field to sort by"
    )
    sort_order: SortOrder = Field(
        default=SortOrder.desc,
        description="Sort order (asc or desc)"
    )


T = TypeVar("T")


class PaginationMeta(CamelModel):
    total: int
    limit: int
    offset: int
    has_next: bool
    has_previous: bool


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: PaginationMeta


class UserRefOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class ApprovalOut(CamelModel):
    id: str
    requested_by: UserRefOut
    action_type: ActionType
    resource_type: ResourceType
    resource_id: Optional[str] = None
    original_data: dict[str, Any] = Field(default_factory=dict)
    new_data: Optional[dict[str, Any]] = None
    reason: Optional[str] = None
    status: ApprovalStatus
    reviewed_by: Optional[UserRefOut] = None
    reviewed_at: Optional[datetime] = None
    review_comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, approval: ApprovalRequestEntity, users: dict[str, UserRef]) -> "ApprovalOut":
        def ref(user_id: str | None) -> UserRefOut | None:
            if not user_id:
                return None
            user = users.get(user_id)
            if user is None:
                return UserRefOut(id=user_id)
            return UserRefOut(id=user.id, name=user.name, email=user.email)

        return cls(
            id=approval.id,
            requested_by=ref(approval.requested_by),
            action_type=approval.action_type,
            resource_type=approval.resource_type,
            resource_id=approval.resource_id,
            original_data=approval.original_data or {},
            new_data=approval.new_data,
            reason=approval.reason,
            status=approval.status,
            reviewed_by=ref(approval.reviewed_by),
            reviewed_at=approval.reviewed_at,
            review_comment=approval.review_comment,
            created_at=approval.created_at,
            updated_at=approval.updated_at,
        )


class ApprovalCreateIn(CamelModel):
    action_type: ActionType
    resource_type: ResourceType
    resource_id: Optional[str] = None
    original_data: Optional[dict[str, Any]] = None
    new_data: Optional[dict[str, Any]] = None
    reason: Optional[str] = Field(default=None, max_length=500)


class ApprovalEnvelope(BaseModel):
    message: str
    approval: ApprovalOut


class ReviewIn(BaseModel):
    action: ReviewAction
    comment: Optional[str] = Field(default=None, max_length=500)


class CountOut(BaseModel):
    count: int


class MessageOut(BaseModel):
    message: str


class WidgetPreferencesIn(BaseModel):
    # Validated by hand so a wrong shape answers 400 like the rest of the API
    widgetVisibility: Any = None


class ColumnPreferencesIn(BaseModel):
    columnVisibility: Optional[dict[str, bool]] = None
