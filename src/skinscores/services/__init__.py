"""Application services over the document store."""

from __future__ import annotations

from skinscores.services.aggregation_service import NightlyAggregationService
from skinscores.services.export_service import ResultExport, ResultExportService
from skinscores.services.history_service import HistoryService
from skinscores.services.patient_service import PatientService
from skinscores.services.submission_service import (
    ScoreSubmission,
    ScoreSubmissionService,
    SubmissionReceipt,
)
from skinscores.services.template_store import TemplateRepository, load_templates_file

__all__ = [
    "HistoryService",
    "NightlyAggregationService",
    "PatientService",
    "ResultExport",
    "ResultExportService",
    "ScoreSubmission",
    "ScoreSubmissionService",
    "SubmissionReceipt",
    "TemplateRepository",
    "load_templates_file",
]
