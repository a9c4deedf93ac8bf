"""Reservation specific rules: payment status aggregation and UI field normalization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Literal

from .fields import to_number, with_timezone

if TYPE_CHECKING:
    from .repository import ResourceRepository

PaymentStatusLiteral = Literal["Pending", "Paid", "Partially Paid", "Not Paid"]

NUMERIC_FIELDS = (
    "additionalCost",
    "itemsTotal",
    "subtotal",
    "securityDeposit",
    "securityDepositPercentage",
    "securityDepositAmount",
    "advance",
    "advancePercentage",
    "advanceAmount",
    "total",
    "remainingBalance",
    "bufferBefore",
    "bufferAfter",
    "availability",
)

DATE_FIELDS = ("pickupDate", "returnDate", "availabilityDate")


@dataclass(frozen=True)
class PaymentStatusCalculation:
    total_paid: float
    remaining_balance: float
    payment_status: PaymentStatusLiteral


def calculate_payment_status(total: float | None, amounts: Iterable[float | None]) -> PaymentStatusCalculation:
    total_paid = sum(float(a or 0) for a in amounts)
    remaining = max(0.0, float(total or 0) - total_paid)

    if total_paid == 0:
        status: PaymentStatusLiteral = "Not Paid"
    elif remaining == 0:
        status = "Paid"
    elif total_paid > 0 and remaining > 0:
        status = "Partially Paid"
    else:
        status = "Pending"

    return PaymentStatusCalculation(
        total_paid=total_paid,
        remaining_balance=remaining,
        payment_status=status,
    )


def update_reservation_payment_status(
    repo: ResourceRepository,
    reservation_id: str,
) -> PaymentStatusCalculation:
    """Recompute a reservation's payment status from the payments recorded against it."""
    reservation = repo.get_or_raise("reservation", reservation_id)
    payments = repo.payments_for_reservation(reservation_id)
    calculation = calculate_payment_status(reservation.total, (p.amount for p in payments))

    repo.update_fields(
        "reservation",
        reservation_id,
        {
            "paymentStatus": calculation.payment_status,
            "remainingBalance": calculation.remaining_balance,
        },
    )
    return calculation


def _item_id(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("_id") or item.get("id"))
    return str(item)


def normalize_reservation_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Turn reservation form values into column-ready values.

    - ``items`` may hold product objects or ids; only ids are kept
    - numeric fields may arrive as strings; empty strings are dropped
    - ``pickupDate`` + ``pickupTime`` style pairs are joined, and date-times
      without an offset are read as UTC
    """
    normalized = dict(data)

    if "items" in normalized:
        normalized["items"] = [_item_id(i) for i in normalized["items"] or []]

    for key in NUMERIC_FIELDS:
        if key not in normalized:
            continue
        if normalized[key] == "" or normalized[key] is None:
            del normalized[key]
            continue
        normalized[key] = to_number(normalized[key])

    for key in DATE_FIELDS:
        time_key = key.replace("Date", "Time")
        time_value = normalized.pop(time_key, None)
        value = normalized.get(key)
        if not isinstance(value, str) or not value:
            continue
        if time_value and "T" not in value:
            value = f"{value}T{time_value}"
        normalized[key] = with_timezone(value)

    return normalized
