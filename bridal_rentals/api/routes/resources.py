"""CRUD routes for the shop's resources.

Every mutation passes through the approval gate first: callers who need
review get a pending approval (202), everybody else goes straight to the
action executor.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import IntegrityError

from bridal_rentals.api.core.auth import get_current_user
from bridal_rentals.api.dependencies import get_approval_gate, get_executor, get_resource_repo
from bridal_rentals.core.errors import (
    InvalidApprovalRequestError,
    ResourceNotFoundError,
    UnsupportedResourceTypeError,
)
from bridal_rentals.domain.approval import ActionType, DefaultApprovalGate, ResourceType
from bridal_rentals.domain.approval.executor import ActionExecutor
from bridal_rentals.domain.resources import ResourceRepository
from bridal_rentals.infrastructure.db.models import User
from bridal_rentals.observability.tracing import log_event, new_trace_id

RESOURCE_ROUTES: list[tuple[ResourceType, str, str]] = [
    (ResourceType.CUSTOMER, "/customers", "Customers"),
    (ResourceType.ITEM, "/products", "Products"),
    (ResourceType.PAYMENT, "/payments", "Payments"),
    (ResourceType.RESERVATION, "/reservations", "Reservations"),
    (ResourceType.COST, "/costs", "Costs"),
]


async def _mutate(
    *,
    action_type: ActionType,
    resource_type: ResourceType,
    resource_id: str | None,
    data: dict[str, Any],
    reason: str | None,
    user: User,
    gate: DefaultApprovalGate,
    executor: ActionExecutor,
    resources: ResourceRepository,
    response: Response,
) -> dict[str, Any]:
    try:
        decision = gate.evaluate(
            user=user,
            action_type=action_type.value,
            resource_type=resource_type.value,
            resource_id=resource_id,
            new_data=data or None,
            reason=reason,
        )
    except (InvalidApprovalRequestError, UnsupportedResourceTypeError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail=f"{resource_type.value} not found")

    if not decision.proceed:
        response.status_code = status.HTTP_202_ACCEPTED
        return decision.response

    trace_id = new_trace_id()
    try:
        return await executor.apply(
            action_type=action_type.value,
            resource_type=resource_type.value,
            resource_id=resource_id,
            data=data,
            acting_user=user.id,
            trace_id=trace_id,
        )
    except ResourceNotFoundError:
        raise HTTPException(status_code=404, detail=f"{resource_type.value} not found")
    except (IntegrityError, ValueError) as exc:
        resources.db.rollback()
        log_event("resource.write_rejected", trace_id=trace_id, resource_type=resource_type.value, error=str(exc))
        raise HTTPException(status_code=400, detail=f"Invalid {resource_type.value} data")


def build_resource_router(resource_type: ResourceType, prefix: str, tag: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", summary=f"List {tag.lower()}")
    async def list_resources(
        limit: int = Query(default=50, ge=1, le=100),
        offset: int = Query(default=0, ge=0),
        _: User = Depends(get_current_user),
        resources: ResourceRepository = Depends(get_resource_repo),
    ):
        rows = resources.list(resource_type.value, limit=limit, offset=offset)
        return [row.to_dict() for row in rows]

    @router.get("/{resource_id}", summary=f"Get one of the {tag.lower()}")
    async def get_resource(
        resource_id: str,
        _: User = Depends(get_current_user),
        resources: ResourceRepository = Depends(get_resource_repo),
    ):
        row = resources.get(resource_type.value, resource_id)
        if row is None:
            raise HTTPException(status_code=404, detail=f"{resource_type.value} not found")
        return row.to_dict()

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_resource(
        response: Response,
        payload: dict[str, Any] = Body(...),
        reason: str | None = Query(default=None, max_length=500),
        user: User = Depends(get_current_user),
        gate: DefaultApprovalGate = Depends(get_approval_gate),
        executor: ActionExecutor = Depends(get_executor),
        resources: ResourceRepository = Depends(get_resource_repo),
    ):
        return await _mutate(
            action_type=ActionType.CREATE,
            resource_type=resource_type,
            resource_id=None,
            data=payload,
            reason=reason,
            user=user,
            gate=gate,
            executor=executor,
            resources=resources,
            response=response,
        )

    @router.put("/{resource_id}")
    async def update_resource(
        resource_id: str,
        response: Response,
        payload: dict[str, Any] = Body(...),
        reason: str | None = Query(default=None, max_length=500),
        user: User = Depends(get_current_user),
        gate: DefaultApprovalGate = Depends(get_approval_gate),
        executor: ActionExecutor = Depends(get_executor),
        resources: ResourceRepository = Depends(get_resource_repo),
    ):
        return await _mutate(
            action_type=ActionType.EDIT,
            resource_type=resource_type,
            resource_id=resource_id,
            data=payload,
            reason=reason,
            user=user,
            gate=gate,
            executor=executor,
            resources=resources,
            response=response,
        )

    @router.delete("/{resource_id}")
    async def delete_resource(
        resource_id: str,
        response: Response,
        reason: str | None = Query(default=None, max_length=500),
        user: User = Depends(get_current_user),
        gate: DefaultApprovalGate = Depends(get_approval_gate),
        executor: ActionExecutor = Depends(get_executor),
        resources: ResourceRepository = Depends(get_resource_repo),
    ):
        return await _mutate(
            action_type=ActionType.DELETE,
            resource_type=resource_type,
            resource_id=resource_id,
            data={},
            reason=reason,
            user=user,
            gate=gate,
            executor=executor,
            resources=resources,
            response=response,
        )

    return router


routers = [build_resource_router(*route) for route in RESOURCE_ROUTES]
