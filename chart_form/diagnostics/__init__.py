"""Diagnostics and processing summaries for observation generation."""

from chart_form.diagnostics.collector import DiagnosticsCollector
from chart_form.diagnostics.models import (
    DiagnosticWarning,
    GenerationDiagnostics,
    ProcessingStatus,
    ProcessingSummary,
)

__all__ = [
    "DiagnosticsCollector",
    "DiagnosticWarning",
    "GenerationDiagnostics",
    "ProcessingStatus",
    "ProcessingSummary",
]
