from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from growup.application.guard import SubmissionGuard
from growup.application.wizards import WizardRegistry
from growup.infrastructure.config import get_settings
from growup.infrastructure.logging import get_logger
from growup.web.routes import api

logger = get_logger(__name__)


def create_application() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app.title,
        version=settings.app.version,
        debug=settings.app.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.submission_guard = SubmissionGuard()
    app.state.wizards = WizardRegistry(max_idle_seconds=settings.app.wizard_idle_timeout)

    app.include_router(api.router)

    logger.info("Application created for %s environment", settings.app.environment)
    return app


app = create_application()
