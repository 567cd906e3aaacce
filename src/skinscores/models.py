"""Pydantic data models for skinscores.

Templates and API payloads use camelCase keys on the wire (``summaryTemplate``,
``copyBlocks``); Python attributes and persisted documents are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Collection names in the document store
TEMPLATES = "scoreTemplates"
SESSIONS = "scoreSessions"
RESULTS = "scoreResults"
AGGREGATES = "aggregateSnapshots"
PATIENTS = "patients"


class CamelModel(BaseModel):
    """Base model accepting both camelCase aliases and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Template model ───────────────────────────────────────────────────


class InputType(str, Enum):
    """Declared type of a template input."""

    NUMBER = "number"
    SELECT = "select"
    MULTISELECT = "multiselect"
    BOOLEAN = "boolean"
    TEXT = "text"


class InputOption(CamelModel):
    """One choice of a select/multiselect input."""

    value: str
    label: str
    score: Optional[float] = None


class InputDefinition(CamelModel):
    """A single typed input of a scoring instrument."""

    id: str
    label: str
    type: InputType
    description: Optional[str] = None
    required: bool = False
    options: Optional[list[InputOption]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    weight: Optional[float] = None

    @model_validator(mode="after")
    def _unique_option_values(self) -> InputDefinition:
        if self.options:
            seen: set[str] = set()
            for option in self.options:
                if option.value in seen:
                    raise ValueError(
                        f"Duplicate option value {option.value!r} in input {self.id!r}"
                    )
                seen.add(option.value)
        return self

    def find_option(self, value: str) -> InputOption | None:
        """Return the option whose value matches exactly, if any."""
        for option in self.options or []:
            if option.value == value:
                return option
        return None


class InterpretationRange(CamelModel):
    """Inclusive ``[min, max]`` score bucket mapped to a severity label."""

    min: float
    max: float
    label: str
    guidance: str


class InterpretationConfig(CamelModel):
    """Interpretation table. Ranges are matched in declaration order."""

    summary_template: str
    ranges: list[InterpretationRange] = Field(default_factory=list)


class CopyBlock(CamelModel):
    """Clinician-facing text block with ``{{placeholder}}`` tokens."""

    label: str
    body_template: str


class ScoreTemplate(CamelModel):
    """Static definition of one scoring instrument."""

    name: str
    slug: str
    category: str
    version: str
    description: str
    citation: Optional[str] = None
    inputs: list[InputDefinition] = Field(default_factory=list)
    interpretation: InterpretationConfig
    copy_blocks: list[CopyBlock] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_input_ids(self) -> ScoreTemplate:
        seen: set[str] = set()
        for item in self.inputs:
            if item.id in seen:
                raise ValueError(f"Duplicate input id {item.id!r} in template {self.slug!r}")
            seen.add(item.id)
        return self

    @property
    def document_id(self) -> str:
        """Document id used when this template version is stored."""
        return f"{self.slug}-v{self.version}"


# ── Persisted records ────────────────────────────────────────────────


class SessionStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"


class ScoreSession(CamelModel):
    """Mutable record of one clinical encounter with a template."""

    id: str
    user_id: str
    template_id: str
    template_slug: Optional[str] = None
    template_name: Optional[str] = None
    status: SessionStatus = SessionStatus.DRAFT
    patient_ref: Optional[str] = None
    inputs: dict[str, Any] = Field(default_factory=dict)
    score: Optional[float] = None
    score_text: Optional[str] = None
    interpretation_label: Optional[str] = None
    interpretation_summary: Optional[str] = None
    result_details: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ScoreResult(CamelModel):
    """Immutable snapshot of one scoring computation."""

    id: str
    session_id: str
    user_id: str
    template_id: str
    template_slug: Optional[str] = None
    template_name: Optional[str] = None
    score: Optional[float] = None
    score_text: Optional[str] = None
    interpretation_label: Optional[str] = None
    interpretation_summary: Optional[str] = None
    copy_blocks: list[str] = Field(default_factory=list)
    details: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None


class AggregateSnapshot(CamelModel):
    """Daily rollup of results for one template."""

    id: str
    template_id: str
    template_slug: Optional[str] = None
    template_name: Optional[str] = None
    period_start: datetime
    period_end: datetime
    count: int = 0
    numeric_count: int = 0
    average_score: Optional[float] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    updated_at: Optional[datetime] = None


class PatientRecord(CamelModel):
    """A patient registered by a clinician; sessions refer to it by ``patient_ref``."""

    id: str
    display_id: str
    owner_user_id: str
    notes: Optional[str] = None
    organization_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ── Caller identity ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Caller:
    """Authenticated identity of the request issuer."""

    uid: str
    role: str = "clinician"
    admin_role: str = "admin"

    @property
    def is_admin(self) -> bool:
        return self.role == self.admin_role
