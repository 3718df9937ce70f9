from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clearlot.infrastructure.database import SessionLocal, engine, initialize_database
from clearlot.infrastructure.notifications import (
    NotificationConnectionManager,
    NotificationEventBus,
    NotificationPublisher,
    NotificationTriggers,
    SqlNotificationStore,
)
from clearlot.config import get_settings
from clearlot.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the database tables on startup and release resources on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the main FastAPI application."""

    settings = get_settings()
    app = FastAPI(title="ClearLot API", lifespan=lifespan)

    manager = NotificationConnectionManager()
    app.state.notification_bus = NotificationEventBus()
    app.state.notification_manager = manager
    app.state.notification_publisher = NotificationPublisher(manager)
    app.state.notification_store = SqlNotificationStore(
        SessionLocal, page_size=settings.notification_page_size
    )
    app.state.notification_triggers = NotificationTriggers(
        app.state.notification_bus, app.state.notification_store
    )

    # Allow requests from the web client.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Invoice-Url"],
    )

    register_routes(app)
    return app


app = create_app()
