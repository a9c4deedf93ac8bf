"""Role based rules for the approval workflow.

- Admins and managers apply changes directly
- Employees go through review, except for recording new costs
- Only admins review; admins and managers may browse every request
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class HasRole(Protocol):
    role: str | None


def _role(user: HasRole | None) -> str:
    if user is None or not user.role:
        return ""
    return user.role.lower()


def is_admin(user: HasRole | None) -> bool:
    return _role(user) == Role.ADMIN.value


def is_manager(user: HasRole | None) -> bool:
    return _role(user) == Role.MANAGER.value or is_admin(user)


def needs_approval(user: HasRole | None, action_type: str, resource_type: str | None = None) -> bool:
    if user is None:
        return True
    if is_manager(user):
        return False
    if _role(user) == Role.EMPLOYEE.value and action_type == "create" and resource_type == "cost":
        return False
    return True


def can_review_approvals(user: HasRole | None) -> bool:
    return is_admin(user)


def can_view_all_approvals(user: HasRole | None) -> bool:
    return is_manager(user)
