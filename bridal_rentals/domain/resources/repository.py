# ============================================================
# DB access layer for customers, products, payments, reservations, costs
# ============================================================
from __future__ import annotations

from typing import Any

from sqlalchemy import DateTime, Float, Integer, select
from sqlalchemy.orm import Session

from bridal_rentals.core.errors import ResourceNotFoundError, UnsupportedResourceTypeError
from bridal_rentals.infrastructure.db.models import (
    ApiMappedMixin,
    Cost,
    Customer,
    Payment,
    Product,
    Reservation,
)

from .fields import parse_datetime, to_number

RESOURCE_MODELS: dict[str, type[ApiMappedMixin]] = {
    "customer": Customer,
    "item": Product,
    "payment": Payment,
    "reservation": Reservation,
    "cost": Cost,
}


class ResourceRepository:
    """
    Generic CRUD over the resource tables, keyed by approval resource type.

    Writes are flushed, not committed: the caller commits once the whole
    change (payment status included) went through.
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def model_for(resource_type: str) -> type[ApiMappedMixin]:
        try:
            return RESOURCE_MODELS[resource_type]
        except KeyError:
            raise UnsupportedResourceTypeError(resource_type) from None

    def get(self, resource_type: str, resource_id: str | None):
        if not resource_id:
            return None
        return self.db.get(self.model_for(resource_type), resource_id)

    def get_or_raise(self, resource_type: str, resource_id: str | None):
        row = self.get(resource_type, resource_id)
        if row is None:
            raise ResourceNotFoundError(resource_type, resource_id)
        return row

    def snapshot(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        return self.get_or_raise(resource_type, resource_id).to_dict()

    def list(self, resource_type: str, *, limit: int = 50, offset: int = 0) -> list:
        model = self.model_for(resource_type)
        query = select(model).order_by(model.created_at.desc()).limit(limit).offset(offset)
        return list(self.db.scalars(query))

    def create(self, resource_type: str, data: dict[str, Any], *, created_by: str):
        model = self.model_for(resource_type)
        row = model(created_by=created_by)
        self._apply(row, data)
        self.db.add(row)
        self.db.flush()
        self.db.refresh(row)
        return row

    def update_fields(self, resource_type: str, resource_id: str, data: dict[str, Any]):
        """Write only the keys present in ``data``; every other column is left alone."""
        row = self.get_or_raise(resource_type, resource_id)
        self._apply(row, data)
        self.db.flush()
        self.db.refresh(row)
        return row

    def delete(self, resource_type: str, resource_id: str) -> dict[str, Any]:
        row = self.get_or_raise(resource_type, resource_id)
        snapshot = row.to_dict()
        self.db.delete(row)
        self.db.flush()
        return snapshot

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def payments_for_reservation(self, reservation_id: str) -> list[Payment]:
        query = select(Payment).where(Payment.reservation == reservation_id)
        return list(self.db.scalars(query))

    def _apply(self, row: ApiMappedMixin, data: dict[str, Any]) -> None:
        for key, value in data.items():
            attr = row.column_for(key)
            if attr is None or attr == "created_by":
                continue
            setattr(row, attr, self._coerce(row, attr, value))

    @staticmethod
    def _coerce(row: ApiMappedMixin, attr: str, value: Any) -> Any:
        column_type = row.__table__.columns[attr].type
        if isinstance(column_type, DateTime):
            return parse_datetime(value)
        if isinstance(column_type, Integer):
            number = to_number(value)
            return None if number is None else int(number)
        if isinstance(column_type, Float):
            return to_number(value)
        return value
