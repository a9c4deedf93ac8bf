from sqlalchemy import (
    Column, String, DateTime, JSON, Text, Float, Integer, Index,
)
from sqlalchemy.orm import declarative_base
from datetime import date, datetime
import uuid

from bridal_rentals.core.clock import utcnow

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


def _json_safe(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class ApiMappedMixin:
    """
    Maps the camelCase keys used by API payloads onto snake_case columns.

    ``__api_fields__`` lists every writable key; anything else in a payload
    is ignored by the resource repository.
    """

    __api_fields__: dict[str, str] = {}

    id = Column(String(32), primary_key=True, default=new_id)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @classmethod
    def column_for(cls, api_key: str) -> str | None:
        return cls.__api_fields__.get(api_key)

    def to_dict(self) -> dict:
        data = {"id": self.id}
        for api_key, attr in self.__api_fields__.items():
            data[api_key] = _json_safe(getattr(self, attr))
        data["createdAt"] = _json_safe(self.created_at)
        data["updatedAt"] = _json_safe(self.updated_at)
        return data


class User(ApiMappedMixin, Base):
    __tablename__ = "users"
    __api_fields__ = {
        "name": "name",
        "email": "email",
        "role": "role",
        "status": "status",
    }

    name = Column(String(50), nullable=False)
    email = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False, default="employee")
    status = Column(String, default="Active")


class Customer(ApiMappedMixin, Base):
    __tablename__ = "customers"
    __api_fields__ = {
        "firstName": "first_name",
        "lastName": "last_name",
        "email": "email",
        "address": "address",
        "idNumber": "id_number",
        "phone": "phone",
        "weddingCity": "wedding_city",
        "whatsapp": "whatsapp",
        "weddingDate": "wedding_date",
        "weddingTime": "wedding_time",
        "weddingLocation": "wedding_location",
        "type": "type",
        "attachments": "attachments",
        "createdBy": "created_by",
    }

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String)
    address = Column(String, nullable=False)
    id_number = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    wedding_city = Column(String, nullable=False)
    whatsapp = Column(String)
    wedding_date = Column(String)
    wedding_time = Column(String)
    wedding_location = Column(String)
    type = Column(String, default="Client")
    attachments = Column(JSON, default=list)
    created_by = Column(String(32), nullable=False)


class Product(ApiMappedMixin, Base):
    __tablename__ = "products"
    __api_fields__ = {
        "name": "name",
        "primaryPhoto": "primary_photo",
        "secondaryImages": "secondary_images",
        "videoUrls": "video_urls",
        "rentalCost": "rental_cost",
        "buyCost": "buy_cost",
        "sellPrice": "sell_price",
        "size": "size",
        "category": "category",
        "subCategory": "sub_category",
        "quantity": "quantity",
        "status": "status",
        "createdBy": "created_by",
    }

    name = Column(String, nullable=False)
    primary_photo = Column(String, nullable=False)
    secondary_images = Column(JSON, default=list)
    video_urls = Column(JSON, default=list)
    rental_cost = Column(Float, nullable=False)
    buy_cost = Column(Float)
    sell_price = Column(Float)
    size = Column(Float)
    category = Column(String(32))
    sub_category = Column(String)
    quantity = Column(Integer, nullable=False, default=0)
    status = Column(String, default="Draft")
    created_by = Column(String(32), nullable=False)


class Payment(ApiMappedMixin, Base):
    __tablename__ = "payments"
    __api_fields__ = {
        "client": "client",
        "reservation": "reservation",
        "paymentDate": "payment_date",
        "amount": "amount",
        "paymentMethod": "payment_method",
        "paymentType": "payment_type",
        "status": "status",
        "reference": "reference",
        "note": "note",
        "attachments": "attachments",
        "createdBy": "created_by",
    }

    client = Column(String(32), nullable=False)
    reservation = Column(String(32), nullable=False, index=True)
    payment_date = Column(DateTime)
    amount = Column(Float)
    payment_method = Column(String)
    payment_type = Column(String)
    status = Column(String, default="Completed")
    reference = Column(String)
    note = Column(Text)
    attachments = Column(JSON, default=list)
    created_by = Column(String(32), nullable=False)


class Reservation(ApiMappedMixin, Base):
    __tablename__ = "reservations"
    __api_fields__ = {
        "type": "type",
        "client": "client",
        "paymentStatus": "payment_status",
        "items": "items",
        "pickupDate": "pickup_date",
        "returnDate": "return_date",
        "availabilityDate": "availability_date",
        "status": "status",
        "additionalCost": "additional_cost",
        "itemsTotal": "items_total",
        "subtotal": "subtotal",
        "securityDeposit": "security_deposit",
        "securityDepositPercentage": "security_deposit_percentage",
        "securityDepositAmount": "security_deposit_amount",
        "advance": "advance",
        "advancePercentage": "advance_percentage",
        "advanceAmount": "advance_amount",
        "total": "total",
        "remainingBalance": "remaining_balance",
        "notes": "notes",
        "bufferBefore": "buffer_before",
        "bufferAfter": "buffer_after",
        "availability": "availability",
        "createdBy": "created_by",
    }

    type = Column(String, nullable=False)
    client = Column(String(32))
    payment_status = Column(String, default="Pending")
    items = Column(JSON, default=list)
    pickup_date = Column(DateTime, nullable=False)
    return_date = Column(DateTime, nullable=False)
    availability_date = Column(DateTime)
    status = Column(String, default="Draft")
    additional_cost = Column(Float, default=0)
    items_total = Column(Float, default=0)
    subtotal = Column(Float, default=0)
    security_deposit = Column(Float, default=0)
    security_deposit_percentage = Column(Float, default=30)
    security_deposit_amount = Column(Float, default=0)
    advance = Column(Float, default=0)
    advance_percentage = Column(Float, default=50)
    advance_amount = Column(Float, default=0)
    total = Column(Float, default=0)
    remaining_balance = Column(Float, default=0)
    notes = Column(Text)
    buffer_before = Column(Float)
    buffer_after = Column(Float)
    availability = Column(Float)
    created_by = Column(String(32), nullable=False)


class Cost(ApiMappedMixin, Base):
    __tablename__ = "costs"
    __api_fields__ = {
        "date": "date",
        "category": "category",
        "amount": "amount",
        "relatedReservation": "related_reservation",
        "relatedProduct": "related_product",
        "notes": "notes",
        "attachments": "attachments",
        "createdBy": "created_by",
    }

    date = Column(DateTime, nullable=False, default=utcnow)
    category = Column(String(32), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    related_reservation = Column(String(32))
    related_product = Column(String(32))
    notes = Column(Text)
    attachments = Column(JSON, default=list)
    created_by = Column(String(32), nullable=False)


class ApprovalRequest(Base):
    __tablename__ = "approval_requests"
    __table_args__ = (
        Index("ix_approval_requests_status_created_at", "status", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    requested_by = Column(String(32), nullable=False, index=True)
    action_type = Column(String, nullable=False)
    resource_type = Column(String, nullable=False)
    resource_id = Column(String(32), nullable=True)
    original_data = Column(JSON, nullable=False, default=dict)
    new_data = Column(JSON, nullable=True)
    reason = Column(String(500))
    status = Column(String, nullable=False, default="pending")
    reviewed_by = Column(String(32), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_comment = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), nullable=False, unique=True)
    widget_preferences = Column(JSON, nullable=True)
    column_preferences = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
