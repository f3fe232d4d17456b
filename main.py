import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, get_settings
from app.interfaces.api.routes import register_routes
from app.services import NotificationServices, build_services


def create_app(
    settings: Settings | None = None,
    *,
    services: NotificationServices | None = None,
) -> FastAPI:
    """Create and configure the notification service application."""

    settings = settings or (services.settings if services else get_settings())
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the notification services at startup and release them on shutdown."""

        app.state.services = services or build_services(settings)
        await app.state.services.start()
        try:
            yield
        finally:
            await app.state.services.stop()

    app = FastAPI(title="Book Swap Notifications", lifespan=lifespan)

    # Allow the browser client served from the local development server.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
