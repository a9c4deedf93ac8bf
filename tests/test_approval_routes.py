from __future__ import annotations

import pytest

from bridal_rentals.domain.approval import DefaultApprovalGate
from bridal_rentals.domain.approval.repository import ApprovalRequestRepository
from bridal_rentals.domain.resources import ResourceRepository
from bridal_rentals.infrastructure.db.models import Cost, Customer

from tests.fixtures.database import make_cost, make_customer, session_headers


def _pending(db, action_type, resource_type, resource_id=None, new_data=None, requested_by="u-employee"):
    gate = DefaultApprovalGate(ApprovalRequestRepository(db), ResourceRepository(db))
    return gate.submit(
        requested_by=requested_by,
        action_type=action_type,
        resource_type=resource_type,
        resource_id=resource_id,
        original_data=None,
        new_data=new_data,
        reason=None,
    )


# ------------------------------------------------------------------------------
# Review
# ------------------------------------------------------------------------------
@pytest.mark.anyio
async def test_review_requires_a_session(client, users) -> None:
    resp = await client.put("/v1/approvals/x/review", json={"action": "approve"})
    assert resp.status_code == 401

    resp = await client.put(
        "/v1/approvals/x/review",
        json={"action": "approve"},
        headers={"cookie": "session=not-json"},
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid session"


@pytest.mark.anyio
async def test_review_requires_an_admin(client, users) -> None:
    for user_id in (users.manager.id, "ghost"):
        resp = await client.put(
            "/v1/approvals/x/review",
            json={"action": "approve"},
            headers=session_headers(user_id),
        )
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Admin access required"


@pytest.mark.anyio
async def test_review_unknown_approval_is_404(client, users) -> None:
    resp = await client.put(
        "/v1/approvals/missing/review",
        json={"action": "reject"},
        headers=session_headers(users.admin.id),
    )
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_review_validates_action(client, users) -> None:
    resp = await client.put(
        "/v1/approvals/x/review",
        json={"action": "maybe"},
        headers=session_headers(users.admin.id),
    )
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_approve_delete_cost(client, db, users) -> None:
    # Arrange
    cost = make_cost(db)
    approval = _pending(db, "delete", "cost", cost.id)

    # Act
    resp = await client.put(
        f"/v1/approvals/{approval.id}/review",
        json={"action": "approve", "comment": "Duplicate entry"},
        headers=session_headers(users.admin.id),
    )

    # Assert
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Request has been approved and executed"
    assert body["approval"]["status"] == "approved"
    assert body["approval"]["reviewedBy"]["name"] == "Amal Admin"
    assert body["approval"]["requestedBy"]["email"] == "employee@shop.example"
    assert body["approval"]["reviewComment"] == "Duplicate entry"
    assert db.get(Cost, cost.id) is None


@pytest.mark.anyio
async def test_review_of_reviewed_approval_is_400(client, db, users) -> None:
    cost = make_cost(db)
    approval = _pending(db, "delete", "cost", cost.id)
    headers = session_headers(users.admin.id)

    first = await client.put(f"/v1/approvals/{approval.id}/review", json={"action": "reject"}, headers=headers)
    second = await client.put(f"/v1/approvals/{approval.id}/review", json={"action": "approve"}, headers=headers)

    assert first.status_code == 200
    assert first.json()["message"] == "Request has been rejected"
    assert second.status_code == 400
    assert second.json()["detail"] == "Approval already reviewed"
    assert ApprovalRequestRepository(db).get(approval.id).status == "rejected"
    assert db.get(Cost, cost.id) is not None


@pytest.mark.anyio
async def test_failed_execution_returns_500_and_stays_pending(client, db, users) -> None:
    customer = make_customer(db)
    approval = _pending(db, "edit", "customer", customer.id, {"phone": "+212611111111"})
    db.delete(db.get(Customer, customer.id))
    db.commit()

    resp = await client.put(
        f"/v1/approvals/{approval.id}/review",
        json={"action": "approve"},
        headers=session_headers(users.admin.id),
    )

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to execute approved action"
    reverted = ApprovalRequestRepository(db).get(approval.id)
    assert reverted.status == "pending"
    assert reverted.reviewed_by is None


# ------------------------------------------------------------------------------
# Submission and listing
# ------------------------------------------------------------------------------
@pytest.mark.anyio
async def test_submit_edit_request(client, db, users) -> None:
    customer = make_customer(db)

    resp = await client.post(
        "/v1/approvals",
        json={
            "actionType": "edit",
            "resourceType": "customer",
            "resourceId": customer.id,
            "newData": {"phone": "+212611111111", "weddingCity": "Fes"},
            "reason": "New phone",
        },
        headers=session_headers(users.employee.id),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"].endswith("2 field(s) will be updated.")
    assert body["approval"]["status"] == "pending"
    assert body["approval"]["originalData"]["phone"] == customer.phone
    assert body["approval"]["requestedBy"]["id"] == users.employee.id


@pytest.mark.anyio
async def test_submit_rejects_empty_changes_and_missing_resources(client, db, users) -> None:
    headers = session_headers(users.employee.id)

    empty = await client.post(
        "/v1/approvals",
        json={"actionType": "edit", "resourceType": "cost", "resourceId": "c1", "newData": {}},
        headers=headers,
    )
    missing = await client.post(
        "/v1/approvals",
        json={"actionType": "delete", "resourceType": "cost", "resourceId": "nope"},
        headers=headers,
    )
    unknown = await client.post(
        "/v1/approvals",
        json={"actionType": "delete", "resourceType": "invoice", "resourceId": "x"},
        headers=headers,
    )

    assert empty.status_code == 400
    assert empty.json()["detail"] == "No changes detected to approve"
    assert missing.status_code == 404
    assert unknown.status_code == 422


@pytest.mark.anyio
async def test_list_approvals_for_managers(client, db, users) -> None:
    cost = make_cost(db)
    _pending(db, "delete", "cost", cost.id)
    _pending(db, "create", "customer", new_data={"firstName": "Lina"}, requested_by=users.other.id)

    denied = await client.get("/v1/approvals", headers=session_headers(users.employee.id))
    resp = await client.get(
        "/v1/approvals",
        params={"resource_type": "customer", "limit": 10},
        headers=session_headers(users.manager.id),
    )

    assert denied.status_code == 403
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["total"] == 1
    assert body["meta"]["hasNext"] is False
    assert body["data"][0]["requestedBy"]["name"] == "Omar Other"


@pytest.mark.anyio
async def test_count_my_requests_and_get(client, db, users) -> None:
    cost = make_cost(db)
    mine = _pending(db, "delete", "cost", cost.id)
    theirs = _pending(db, "create", "cost", new_data={"amount": 5}, requested_by=users.other.id)

    admin_count = await client.get("/v1/approvals/count", headers=session_headers(users.admin.id))
    employee_count = await client.get("/v1/approvals/count", headers=session_headers(users.employee.id))
    my_requests = await client.get("/v1/approvals/my-requests", headers=session_headers(users.employee.id))
    own = await client.get(f"/v1/approvals/{mine.id}", headers=session_headers(users.employee.id))
    foreign = await client.get(f"/v1/approvals/{theirs.id}", headers=session_headers(users.employee.id))
    as_manager = await client.get(f"/v1/approvals/{theirs.id}", headers=session_headers(users.manager.id))

    assert admin_count.json() == {"count": 2}
    assert employee_count.json() == {"count": 0}
    assert [a["id"] for a in my_requests.json()] == [mine.id]
    assert own.status_code == 200
    assert foreign.status_code == 403
    assert as_manager.status_code == 200


@pytest.mark.anyio
async def test_delete_approval(client, db, users) -> None:
    cost = make_cost(db)
    approval = _pending(db, "delete", "cost", cost.id)

    as_manager = await client.delete(f"/v1/approvals/{approval.id}", headers=session_headers(users.manager.id))
    as_admin = await client.delete(f"/v1/approvals/{approval.id}", headers=session_headers(users.admin.id))
    again = await client.delete(f"/v1/approvals/{approval.id}", headers=session_headers(users.admin.id))

    assert as_manager.status_code == 403
    assert as_admin.status_code == 200
    assert again.status_code == 404
