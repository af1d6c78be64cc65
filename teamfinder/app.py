"""
FastAPI application factory
One factory serves every role; the configured role decides which routers and
background consumers the process runs
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamfinder.api import health, notifications, teams, users
from teamfinder.container import ServiceContainer
from teamfinder.core.config import Config, config as default_config
from teamfinder.core.errors import (
    EmailDeliveryError,
    ErrorResponse,
    StoreUnavailableError,
    email_delivery_handler,
    error_response_handler,
    http_exception_handler,
    store_unavailable_handler,
)
from teamfinder.core.logger import logger
from teamfinder.middleware import CorrelationIdMiddleware

SERVICE_TITLES = {
    "user": "User Service",
    "team_matching": "Team Matching Service",
    "notification": "Notification Service",
}


async def validation_exception_handler(request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "Validation error", "details": exc.errors()},
    )


def create_app(config: Optional[Config] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the FastAPI app for the configured service role"""
    config = config or default_config
    container = container or ServiceContainer(config)
    title = SERVICE_TITLES[container.role]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {title}...")
        await container.start()
        logger.info(
            f"{title} started successfully",
            metadata={
                "service_name": config.service_name,
                "version": config.service_version,
                "environment": config.environment,
                "port": config.port,
            },
        )

        yield

        # Shutdown
        logger.info(f"Shutting down {title}...")
        await container.stop()

    app = FastAPI(
        title=title,
        description="Team Finder microservice",
        version=config.service_version,
        lifespan=lifespan,
    )
    app.state.container = container

    # Configure error handlers
    app.add_exception_handler(ErrorResponse, error_response_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(EmailDeliveryError, email_delivery_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware, header_name=config.correlation_id_header)

    # Include API routers for the role
    app.include_router(health.router, tags=["health"])
    if container.role == "user":
        app.include_router(users.router, prefix="/api/users", tags=["users"])
    elif container.role == "team_matching":
        app.include_router(teams.router, prefix="/api/teams", tags=["teams"])
    else:
        app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
        app.include_router(notifications.hub_router)

    return app
