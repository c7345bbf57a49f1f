"""Data models for generation diagnostics and processing summaries."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

Stage = Literal["coercion", "assembly", "calculation", "linking"]


class ProcessingStatus(str, Enum):
    """Status of observation generation."""

    SUCCESS = "success"  # Every populated input became an observation
    PARTIAL = "partial"  # Some inputs were skipped
    FAILED = "failed"  # Validation rejected the submission


class DiagnosticWarning(BaseModel):
    """A silent skip recorded during generation."""

    stage: Stage
    code: str  # Warning code like "EMPTY_GROUP"
    message: str
    field_id: str | None = None
    details: dict | None = None


class GenerationDiagnostics(BaseModel):
    """Diagnostics for one submission."""

    template_id: str
    status: ProcessingStatus
    warnings: list[DiagnosticWarning] = Field(default_factory=list)

    def codes(self) -> list[str]:
        """Warning codes in the order they were recorded."""
        return [warning.code for warning in self.warnings]


class ProcessingSummary(BaseModel):
    """What a generation run produced."""

    total_form_fields: int
    observations_created: int
    observation_types: dict[str, int] = Field(default_factory=dict)
    value_types: dict[str, int] = Field(default_factory=dict)
    has_complex_values: bool = False
    has_calculated_values: bool = False
