"""Collector for generation diagnostics.

Records every silent skip taken while assembling and linking
observations so callers can see why an input produced nothing.
"""

import logging

from chart_form.diagnostics.models import (
    DiagnosticWarning,
    GenerationDiagnostics,
    ProcessingStatus,
    Stage,
)

logger = logging.getLogger(__name__)


class DiagnosticsCollector:
    """Collects skip warnings throughout generation for one submission."""

    def __init__(self, template_id: str) -> None:
        """Initialize the collector.

        Args:
            template_id: The template the submission was made against.
        """
        self.template_id = template_id
        self._warnings: list[DiagnosticWarning] = []

    def add_warning(
        self,
        stage: Stage,
        code: str,
        message: str,
        field_id: str | None = None,
        details: dict | None = None,
    ) -> None:
        """Record a warning.

        Args:
            stage: Processing stage where the skip happened.
            code: Warning code (e.g., "UNMAPPED_FIELD").
            message: Human-readable message.
            field_id: Optional field the warning relates to.
            details: Optional additional details.
        """
        logger.debug("%s [%s]: %s", code, stage, message)
        self._warnings.append(
            DiagnosticWarning(
                stage=stage,
                code=code,
                message=message,
                field_id=field_id,
                details=details,
            )
        )

    @property
    def warnings(self) -> list[DiagnosticWarning]:
        return list(self._warnings)

    def finalize(self) -> GenerationDiagnostics:
        """Return the diagnostics for the submission.

        Unmapped fields alone do not make a run partial: a form may carry
        fields that are never meant to become observations.
        """
        skipped = [w for w in self._warnings if w.code != "UNMAPPED_FIELD"]
        status = ProcessingStatus.PARTIAL if skipped else ProcessingStatus.SUCCESS
        return GenerationDiagnostics(
            template_id=self.template_id,
            status=status,
            warnings=list(self._warnings),
        )
