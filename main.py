from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.errors import AccessError, StorageUnavailable
from core.logging_config import logger

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.permissions import router as permissions_router
from routers.admin_permissions import router as admin_permissions_router
from routers.admin import router as admin_router
from routers.access import router as access_router
from routers.health import router as health_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Building-scoped permissions for tenant associations",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info("Starting Tenantry API")
        validate_config_on_startup()

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(AccessError)
    async def handle_access_error(request: Request, exc: AccessError):
        if isinstance(exc, StorageUnavailable):
            logger.error(
                f"Storage unavailable at {request.url.path}: "
                f"{exc.operation}: {exc.detail}"
            )
        elif exc.status_code in (401, 403):
            logger.warning(f"HTTP {exc.status_code} at {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url}: {exc.detail}"
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------
    app.include_router(auth_router)
    app.include_router(permissions_router)
    app.include_router(access_router)

    # Admin
    app.include_router(admin_permissions_router)
    app.include_router(admin_router)

    # Health
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()
