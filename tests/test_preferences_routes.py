from __future__ import annotations

import pytest

from tests.fixtures.database import session_headers


@pytest.mark.anyio
async def test_widgets_default_then_saved(client, users) -> None:
    headers = session_headers(users.employee.id)

    before = await client.get("/v1/user-preferences/widgets", headers=headers)
    saved = await client.put(
        "/v1/user-preferences/widgets",
        json={"widgetVisibility": ["stats", "returns"]},
        headers=headers,
    )
    after = await client.get("/v1/user-preferences/widgets", headers=headers)

    assert before.json() == {
        "success": True,
        "widgetPreferences": ["stats", "pickups", "returns", "quickActions", "systemHealth"],
        "isDefault": True,
    }
    assert saved.json()["success"] is True
    assert after.json()["widgetPreferences"] == ["stats", "returns"]
    assert after.json()["isDefault"] is False


@pytest.mark.anyio
async def test_widgets_must_be_a_list(client, users) -> None:
    resp = await client.put(
        "/v1/user-preferences/widgets",
        json={"widgetVisibility": "stats"},
        headers=session_headers(users.employee.id),
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "widgetVisibility must be an array"


@pytest.mark.anyio
async def test_columns_are_saved_per_page(client, users) -> None:
    headers = session_headers(users.manager.id)

    default = await client.get("/v1/user-preferences/columns/customers", headers=headers)
    await client.put(
        "/v1/user-preferences/columns/payments",
        json={"columnVisibility": {"amount": True, "note": False}},
        headers=headers,
    )
    payments = await client.get("/v1/user-preferences/columns/payments", headers=headers)
    customers = await client.get("/v1/user-preferences/columns/customers", headers=headers)

    assert default.json()["isDefault"] is True
    assert default.json()["columnPreferences"]["firstName"] is True
    assert payments.json() == {
        "success": True,
        "columnPreferences": {"amount": True, "note": False},
        "isDefault": False,
    }
    assert customers.json()["columnPreferences"]["phone"] is True


@pytest.mark.anyio
async def test_columns_require_body_and_session(client, users) -> None:
    missing = await client.put(
        "/v1/user-preferences/columns/customers",
        json={},
        headers=session_headers(users.manager.id),
    )
    anonymous = await client.get("/v1/user-preferences/columns/customers")

    assert missing.status_code == 400
    assert missing.json()["detail"] == "columnVisibility is required"
    assert anonymous.status_code == 401
