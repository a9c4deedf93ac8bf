# ============================================================
# Business/domain entities
# ============================================================
from dataclasses import dataclass, field
from typing import Any, Optional, Literal
from datetime import datetime

SortOrderLiteral = Literal["asc", "desc"]
ApprovalSortFieldLiteral = Literal["created_at", "status", "resource_type"]


@dataclass(frozen=True)
class ApprovalGateResult:
    proceed: bool
    response: dict[str, Any] | None = None


@dataclass(frozen=True)
class ApprovalFilters:
    status: Optional[str] = None
    resource_type: Optional[str] = None
    action_type: Optional[str] = None
    requested_by: Optional[str] = None


@dataclass(frozen=True)
class Pagination:
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True)
class Sorting:
    sort_by: ApprovalSortFieldLiteral = "created_at"
    sort_order: SortOrderLiteral = "desc"


@dataclass(frozen=True)
class PageMeta:
    total: int
    limit: int
    offset: int
    has_next: bool
    has_previous: bool


@dataclass(frozen=True)
class PageResult:
    data: list["ApprovalRequestEntity"]
    meta: PageMeta


@dataclass(frozen=True)
class UserRef:
    id: str
    name: str | None = None
    email: str | None = None


@dataclass
class ApprovalRequestEntity:
    id: str
    requested_by: str
    action_type: str
    resource_type: str
    resource_id: str | None = None
    original_data: dict[str, Any] = field(default_factory=dict)
    new_data: dict[str, Any] | None = None
    reason: str | None = None
    status: str = "pending"
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_comment: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
