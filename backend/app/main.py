"""FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend.app.api.routes.budget import router as budget_router
from backend.app.api.routes.days import router as days_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.map import router as map_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.permissions import router as permissions_router
from backend.app.api.routes.transport import router as transport_router
from backend.app.config import get_settings
from backend.app.errors import InputValidationError, PermissionDeniedError, RemoteServiceError
from backend.app.utils.logging import configure_logging

logger = logging.getLogger(__name__)

configure_logging(get_settings().log_level)

app = FastAPI(title="Trip Itinerary Engine", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(map_router)
app.include_router(budget_router)
app.include_router(permissions_router)
app.include_router(transport_router)
app.include_router(days_router)


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError) -> JSONResponse:
    """Locally rejected input."""
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    """Action refused by the permission gate."""
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc), "role": exc.role, "action": exc.action},
    )


@app.exception_handler(RemoteServiceError)
async def remote_service_handler(request: Request, exc: RemoteServiceError) -> JSONResponse:
    """Upstream itinerary API failure."""
    logger.warning(
        "Upstream call failed",
        extra={"structured": {"path": request.url.path, "status_code": exc.status_code}},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc), "upstream_status": exc.status_code},
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Itinerary Engine", "version": "0.1.0"}
