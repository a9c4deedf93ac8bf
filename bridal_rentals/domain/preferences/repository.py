from sqlalchemy import select
from sqlalchemy.orm import Session

from bridal_rentals.infrastructure.db.models import UserPreferences

DEFAULT_WIDGETS = ["stats", "pickups", "returns", "quickActions", "systemHealth"]

_DEFAULT_COLUMNS: dict[str, dict[str, bool]] = {
    "customers": {
        "id": True, "firstName": True, "lastName": True, "address": False,
        "idNumber": False, "phone": True, "weddingDate": True, "weddingTime": False,
        "weddingLocation": False, "weddingCity": True, "type": False,
        "createdAt": True, "updatedAt": False, "createdBy": False, "actions": True,
    },
    "payments": {
        "id": True, "customer": True, "reservation": True, "amount": True,
        "paymentDate": True, "paymentMethod": True, "paymentType": True,
        "reference": True, "note": True, "attachments": True,
        "createdBy": False, "actions": True,
    },
    "reservations": {
        "id": True, "client": True, "weddingDate": True, "items": True, "type": True,
        "pickupDate": True, "returnDate": True, "status": True, "totalCost": True,
        "balance": True, "createdAt": False, "createdBy": False, "actions": True,
    },
    "products": {
        "id": True, "name": True, "category": True, "subCategory": True,
        "rentalCost": True, "buyCost": True, "sellPrice": True, "size": True,
        "quantity": True, "status": True, "createdAt": False, "updatedAt": False,
        "createdBy": False, "actions": True,
    },
}


def default_columns(page: str) -> dict[str, bool]:
    return dict(_DEFAULT_COLUMNS.get(page, {}))


class UserPreferencesRepository:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: str) -> UserPreferences | None:
        query = select(UserPreferences).where(UserPreferences.user_id == user_id)
        return self.db.scalars(query).first()

    def _find_or_new(self, user_id: str) -> UserPreferences:
        prefs = self._find(user_id)
        if prefs is None:
            prefs = UserPreferences(
                user_id=user_id,
                column_preferences={"customers": default_columns("customers")},
            )
            self.db.add(prefs)
        return prefs

    def get_widgets(self, user_id: str) -> tuple[list[str], bool]:
        """Visible dashboard widgets, and whether they are the defaults."""
        prefs = self._find(user_id)
        if prefs is None or prefs.widget_preferences is None:
            return list(DEFAULT_WIDGETS), True
        return list(prefs.widget_preferences), False

    def save_widgets(self, user_id: str, widgets: list[str]) -> None:
        prefs = self._find_or_new(user_id)
        prefs.widget_preferences = list(widgets)
        self.db.commit()

    def get_columns(self, user_id: str, page: str) -> tuple[dict[str, bool], bool]:
        prefs = self._find(user_id)
        saved = (prefs.column_preferences or {}) if prefs else {}
        if page not in saved:
            return default_columns(page), True
        return dict(saved[page]), False

    def save_columns(self, user_id: str, page: str, columns: dict[str, bool]) -> None:
        prefs = self._find_or_new(user_id)
        # JSON columns only notice reassignment, not in-place edits
        prefs.column_preferences = {**(prefs.column_preferences or {}), page: dict(columns)}
        self.db.commit()
