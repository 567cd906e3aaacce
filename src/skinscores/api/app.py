"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, Optional

from fastapi import FastAPI

from skinscores.api.middleware.error_handler import register_error_handlers
from skinscores.api.routes import exports, health, history, patients, scores, tool_results
from skinscores.core.config import APIConfig, AppSettings
from skinscores.core.logging_config import setup_logging
from skinscores.core.startup_checks import validate_settings
from skinscores.persistence.factory import create_document_store
from skinscores.services import (
    HistoryService,
    NightlyAggregationService,
    PatientService,
    ResultExportService,
    ScoreSubmissionService,
    TemplateRepository,
)

if TYPE_CHECKING:
    from skinscores.persistence.protocols import IDocumentStore

log = logging.getLogger(__name__)


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("skinscores")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


def wire_services(app: FastAPI, settings: AppSettings, store: IDocumentStore) -> None:
    """Attach the store and every service built on it to ``app.state``."""
    templates = TemplateRepository(store)
    app.state.settings = settings
    app.state.store = store
    app.state.templates = templates
    app.state.submission_service = ScoreSubmissionService(store, templates)
    app.state.export_service = ResultExportService(
        store,
        chunk_size=settings.export.chunk_size,
        max_session_ids=settings.export.max_session_ids,
    )
    app.state.history_service = HistoryService(store, chunk_size=settings.export.chunk_size)
    app.state.aggregation_service = NightlyAggregationService(store)
    app.state.patient_service = PatientService(store)


def create_app(
    settings: Optional[AppSettings] = None,
    store: Optional[IDocumentStore] = None,
) -> FastAPI:
    """Build the application.

    ``settings`` and ``store`` default to the environment configuration and
    the backend it names; tests pass their own to share a store with fixtures.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application startup/shutdown lifecycle."""
        resolved = settings or AppSettings()
        validate_settings(resolved)
        setup_logging(resolved.observability)
        wire_services(app, resolved, store or create_document_store(resolved.persistence))
        log.info("skinscores API ready")
        yield

    api_config = settings.api if settings else APIConfig()
    app = FastAPI(
        title=api_config.title,
        description=api_config.description,
        version=_get_version(),
        lifespan=lifespan,
    )

    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(scores.router, prefix="/api")
    app.include_router(tool_results.router, prefix="/api")
    app.include_router(exports.router, prefix="/api")
    app.include_router(history.router, prefix="/api")
    app.include_router(patients.router, prefix="/api")
    return app


app = create_app()
