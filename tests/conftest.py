from __future__ import annotations

import httpx
import pytest
from httpx import ASGITransport

from bridal_rentals.api.core.container import get_container
from bridal_rentals.api.dependencies import get_blob_store
from bridal_rentals.app.main import app
from bridal_rentals.infrastructure.db.connection import get_db
from bridal_rentals.infrastructure.storage import InMemoryBlobStore

from tests.fixtures.database import make_session, seed_users


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db():
    session = make_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    return seed_users(db)


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
async def client(db, blob_store):
    def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    try:
        async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()
        get_container.cache_clear()
