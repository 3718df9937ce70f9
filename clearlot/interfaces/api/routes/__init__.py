from fastapi import FastAPI

from .admin_invoices import router as admin_invoices_router
from .admin_marketplace import router as admin_marketplace_router
from .admin_notifications import router as admin_notifications_router
from .auth import router as auth_router
from .marketplace import router as marketplace_router
from .notifications import router as notifications_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(auth_router)
    app.include_router(notifications_router)
    app.include_router(marketplace_router)
    app.include_router(admin_invoices_router)
    app.include_router(admin_marketplace_router)
    app.include_router(admin_notifications_router)
