from fastapi import FastAPI

from .approvals import router as approvals_router
from .preferences import router as preferences_router
from .resources import routers as resource_routers


def register_routes(app: FastAPI):
    app.include_router(approvals_router, prefix="/v1")
    app.include_router(preferences_router, prefix="/v1")
    for router in resource_routers:
        app.include_router(router, prefix="/v1")
