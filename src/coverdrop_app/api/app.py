"""FastAPI application factory.

Routers are registered explicitly. The service container is built by the
caller and attached to ``app.state`` so tests can wire their own.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from coverdrop_app.api.error_handlers import register_error_handlers
from coverdrop_app.api.routes import drops, health, notifications, policies, profiles, subscriptions
from coverdrop_app.core.container import ServiceContainer

logger = logging.getLogger(__name__)


def create_app(container: ServiceContainer) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("CoverDrop API started")
        yield
        logger.info("CoverDrop API shutting down")
        container.close()

    app = FastAPI(title="CoverDrop API", version="1.0.0", lifespan=lifespan)
    app.state.container = container

    app.include_router(health.router)
    app.include_router(policies.router)
    app.include_router(drops.router)
    app.include_router(profiles.router)
    app.include_router(subscriptions.router)
    app.include_router(notifications.router)

    register_error_handlers(app)
    return app
