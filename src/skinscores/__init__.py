"""skinscores: template-driven clinical scoring with transactional persistence.

Public API::

    from skinscores import (
        AppSettings,
        ScoreTemplate, ScoreSession, ScoreResult, AggregateSnapshot, Caller,
        PatientRecord,
        compute_outcome,
        ScoreSubmissionService, ResultExportService,
        NightlyAggregationService, HistoryService, PatientService,
        TemplateRepository,
        create_document_store,
    )
"""

from __future__ import annotations

from skinscores.core.config import AppSettings
from skinscores.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    SkinScoresError,
    UnauthenticatedError,
)
from skinscores.models import (
    AggregateSnapshot,
    Caller,
    PatientRecord,
    ScoreResult,
    ScoreSession,
    ScoreTemplate,
)
from skinscores.persistence import create_document_store
from skinscores.scoring import compute_outcome
from skinscores.services import (
    HistoryService,
    NightlyAggregationService,
    PatientService,
    ResultExportService,
    ScoreSubmissionService,
    TemplateRepository,
)

__all__ = [
    "AppSettings",
    "ScoreTemplate",
    "ScoreSession",
    "ScoreResult",
    "AggregateSnapshot",
    "Caller",
    "PatientRecord",
    "compute_outcome",
    "ScoreSubmissionService",
    "ResultExportService",
    "NightlyAggregationService",
    "HistoryService",
    "PatientService",
    "TemplateRepository",
    "create_document_store",
    "SkinScoresError",
    "UnauthenticatedError",
    "InvalidArgumentError",
    "NotFoundError",
    "PermissionDeniedError",
]
