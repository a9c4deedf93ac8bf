from types import SimpleNamespace

import pytest

from bridal_rentals.domain.policies import (
    can_review_approvals,
    can_view_all_approvals,
    is_admin,
    needs_approval,
)


def _user(role):
    return SimpleNamespace(role=role)


@pytest.mark.parametrize("role", ["admin", "Admin", "ADMIN", "manager", "Manager"])
@pytest.mark.parametrize("action", ["create", "edit", "delete"])
def test_privileged_roles_never_need_approval(role: str, action: str) -> None:
    assert needs_approval(_user(role), action, "customer") is False


@pytest.mark.parametrize(
    "action, resource_type, expected",
    [
        ("create", "cost", False),
        ("edit", "cost", True),
        ("delete", "cost", True),
        ("create", "customer", True),
        ("edit", "payment", True),
        ("delete", "reservation", True),
    ],
)
def test_employee_changes_need_approval_except_new_costs(action: str, resource_type: str, expected: bool) -> None:
    assert needs_approval(_user("employee"), action, resource_type) is expected


def test_unknown_or_missing_user_needs_approval() -> None:
    assert needs_approval(None, "edit", "customer") is True
    assert needs_approval(_user(None), "create", "cost") is True
    assert needs_approval(_user("intern"), "create", "cost") is True


def test_review_and_listing_rights() -> None:
    assert can_review_approvals(_user("Admin"))
    assert not can_review_approvals(_user("manager"))
    assert can_view_all_approvals(_user("manager"))
    assert not can_view_all_approvals(_user("employee"))
    assert not is_admin(None)
