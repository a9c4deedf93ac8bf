"""This module handles the rental shop's resource collections."""
from .repository import ResourceRepository, RESOURCE_MODELS
from .reservation import (
    PaymentStatusCalculation,
    calculate_payment_status,
    update_reservation_payment_status,
    normalize_reservation_fields,
)
