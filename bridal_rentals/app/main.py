"""Bridal rentals back-office API.

Serves the admin dashboard:
- customers, products, reservations, payments and costs
- the approval queue that sits in front of employee changes
- per-user dashboard and table preferences

Important:
- Employees never write directly; their changes wait for an admin
- Files uploaded alongside a pending change live in a staging folder
  until the change is approved
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from bridal_rentals.api.routes import register_routes
from bridal_rentals.config import settings
from bridal_rentals.infrastructure.db.connection import init_db
from bridal_rentals.observability.tracing import configure_logging

tags_metadata = [
    {
        "name": "Approvals",
        "description": "Submit, review and track changes waiting for an admin"
    },
    {
        "name": "Customers",
        "description": "Bridal customers and their documents"
    },
    {
        "name": "Products",
        "description": "Dresses and accessories available for rent or sale"
    },
    {
        "name": "Reservations",
        "description": "Bookings with pickup and return dates"
    },
    {
        "name": "Payments",
        "description": "Payments recorded against reservations"
    },
    {
        "name": "Costs",
        "description": "Shop expenses"
    },
    {
        "name": "User Preferences",
        "description": "Dashboard widgets and table columns per user"
    }
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    init_db()
    yield


app = FastAPI(
    title='Bridal Rentals Admin API',
    version='1.0.0',
    description='Back office for a bridal rental shop',
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Register all API routes
register_routes(app)
