"""
EduPortal FastAPI Application

Role-based academic administration (admin, curator, teacher, student)
on top of a hosted backend-as-a-service.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eduportal import __version__
from eduportal.backend import BackendClient, BackendError
from eduportal.config import settings
from eduportal.core.middleware import AccessGateMiddleware
from eduportal.core.validation import ValidationError

logger = logging.getLogger(__name__)

# Backend codes passed through to the caller; anything else is a bad gateway
MIRRORED_BACKEND_CODES = {400, 401, 404, 409}


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Startup:
    - Report missing configuration
    - Open the shared backend client

    Shutdown:
    - Close the backend client
    """
    logger.info("EduPortal starting...")

    missing = settings.missing_env_vars
    if missing:
        logger.warning(f"Missing environment variables: {', '.join(missing)}")

    app.state.backend = BackendClient.from_settings()
    logger.info(f"Backend client ready for {settings.APPWRITE_ENDPOINT}")

    yield

    logger.info("EduPortal shutting down...")
    await app.state.backend.aclose()
    logger.info("Shutdown complete")


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def backend_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = exc.code if isinstance(exc, BackendError) else 0
    status_code = code if code in MIRRORED_BACKEND_CODES else 502
    logger.error(f"Backend error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    configure_logging()

    app = FastAPI(
        title="EduPortal",
        description="Role-based academic administration dashboard API",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(BackendError, backend_error_handler)

    # Access gate runs inside CORS
    app.add_middleware(AccessGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_local else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"], response_model=None)
    async def health_check(request: Request) -> JSONResponse:
        """Health check endpoint for load balancers.

        Returns:
            - status: healthy/unhealthy
            - checks: Individual health checks
        """
        checks: dict[str, dict[str, Any]] = {}

        backend: BackendClient = request.app.state.backend
        if await backend.ping():
            checks["backend"] = {"status": "healthy"}
        else:
            checks["backend"] = {"status": "unhealthy", "endpoint": settings.APPWRITE_ENDPOINT}

        missing = settings.missing_env_vars
        if missing:
            checks["config"] = {"status": "unhealthy", "missing": list(missing)}
        else:
            checks["config"] = {"status": "healthy"}

        all_healthy = all(check["status"] == "healthy" for check in checks.values())
        status_code = 200 if all_healthy else 503

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if all_healthy else "unhealthy",
                "environment": settings.ENVIRONMENT,
                "checks": checks,
            },
        )

    @app.get("/health/live", tags=["Health"])
    async def liveness_check() -> dict[str, str]:
        """Liveness check: 200 while the process is up."""
        return {"status": "alive"}

    # Register routers
    from eduportal.api.v1 import admin, auth, curator, student, system, teacher

    app.include_router(system.router, prefix="/api", tags=["System"])
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(admin.router, prefix="/admin", tags=["Admin"])
    app.include_router(curator.router, prefix="/curator", tags=["Curator"])
    app.include_router(teacher.router, prefix="/teacher", tags=["Teacher"])
    app.include_router(student.router, prefix="/student", tags=["Student"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "eduportal.main:app",
        host="0.0.0.0",  # nosec B104 - Intentional for containerized deployment
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
