"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from medication_reminder.api.medications import router as medications_router
from medication_reminder.api.profiles import router as profiles_router
from medication_reminder.api.shares import router as shares_router
from medication_reminder.app_logging import configure_logging
from medication_reminder.containers import AppContainer
from medication_reminder.domain.errors import (
    InvalidRangeError,
    InvalidScheduleError,
    MedicationLimitError,
    MedicationNotFoundError,
    PermissionDeniedError,
    ProfileNotFoundError,
    ShareNotFoundError,
    ShareTransitionError,
)

_ERROR_STATUSES: dict[type[Exception], int] = {
    InvalidScheduleError: 422,
    InvalidRangeError: status.HTTP_400_BAD_REQUEST,
    MedicationNotFoundError: status.HTTP_404_NOT_FOUND,
    ShareNotFoundError: status.HTTP_404_NOT_FOUND,
    ProfileNotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    MedicationLimitError: status.HTTP_409_CONFLICT,
    ShareTransitionError: status.HTTP_409_CONFLICT,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Medication Reminder")
    app.state.container = container

    app.include_router(medications_router)
    app.include_router(profiles_router)
    app.include_router(shares_router)

    async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code = _ERROR_STATUSES.get(type(exc), status.HTTP_400_BAD_REQUEST)
        logger.warning(
            "Request rejected: path=%s error=%s detail=%s",
            request.url.path,
            type(exc).__name__,
            exc,
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    for error_type in (*_ERROR_STATUSES, ValueError):
        app.add_exception_handler(error_type, domain_error_handler)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
