from __future__ import annotations

import logging

from fastapi import FastAPI

from mentor_portal.application.dtos.common_dto import HealthResponse, RootResponse
from mentor_portal.domain.errors import ProvisionError
from mentor_portal.infrastructure.api.middlewares import add_default_middlewares
from mentor_portal.infrastructure.api.routes.auth_routes import router as auth_router
from mentor_portal.infrastructure.api.routes.mentor_routes import router as mentor_router
from mentor_portal.infrastructure.api.routes.provisioning_routes import provision_error_handler
from mentor_portal.infrastructure.api.routes.provisioning_routes import router as provisioning_router
from mentor_portal.infrastructure.api.routes.student_routes import router as student_router
from mentor_portal.infrastructure.config import Settings, configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="Mentor Portal Backend",
        version="0.1.0",
        description="""
        ## Mentor Portal Backend API

        Backend for the student–mentor management portal, with Supabase for
        auth and the relational store.

        ### Features
        - **Mentor provisioning**: Create a confirmed auth account and its
          mentor profile in one call
        - **Rosters**: List, search and edit mentors and students
        - **Attendance**: Per-student attendance records and totals

        ### Authentication
        Dashboard endpoints require a Supabase access token:
        ```
        Authorization: Bearer your-jwt-token
        ```

        ### Error Responses
        - **400 Bad Request**: Invalid request parameters or malformed data
        - **401 Unauthorized**: Missing or invalid authentication token
        - **404 Not Found**: Requested profile does not exist
        - **422 Unprocessable Entity**: Validation error in request body
        - **500 Internal Server Error**: Upstream auth or database failure
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app, settings)
    app.add_exception_handler(ProvisionError, provision_error_handler)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the Mentor Portal API",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "mentor-portal-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(provisioning_router)
    app.include_router(auth_router)
    app.include_router(mentor_router)
    app.include_router(student_router)

    logger.info(
        "Mentor portal started (env=%s, supabase=%s, local_db=%s)",
        settings.environment,
        "disabled" if settings.supabase_disabled else "enabled",
        settings.use_local_db,
    )
    return app


app = create_app()
