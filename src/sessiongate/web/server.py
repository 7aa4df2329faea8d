from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sessiongate.core.core import Core
from sessiongate.errors import CapacityError, UserError
from sessiongate.web.error_handlers import capacity_error_handler, general_exception_handler, user_error_handler
from sessiongate.web.openapi import set_custom_openapi
from sessiongate.web.routers import auth_router


def create_fastapi_app(core: Core) -> FastAPI:
    """Create and configure FastAPI application."""
    config = core.config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """FastAPI application lifespan management."""
        app.state.core = core
        async with core.lifespan():
            yield

    app = FastAPI(
        title="sessiongate API",
        lifespan=lifespan,
        openapi_tags=[],
    )

    # Cookies only travel cross-origin with credentials enabled
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Health check endpoint (at root level, not versioned)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    app.include_router(auth_router, prefix="/api/v1")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(CapacityError, capacity_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app, config.cookie_name)

    return app
