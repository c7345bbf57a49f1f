"""Pipeline for form submissions.

Validates a data bag against its template, generates the observations,
links them, and summarizes the result. Template lookup and persistence
belong to collaborators passed in by the caller.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from chart_form.builders.observation import Observation, ObservationAssembler
from chart_form.core.protocols import Clock, ObservationStore, TemplateStore, utc_now
from chart_form.diagnostics.collector import DiagnosticsCollector
from chart_form.diagnostics.models import GenerationDiagnostics, ProcessingSummary
from chart_form.diagnostics.summary import SummaryBuilder
from chart_form.errors import ConfigurationError
from chart_form.linking.linker import RelationshipLinker
from chart_form.registry.models import FormTemplate
from chart_form.registry.templates import TemplateRegistry
from chart_form.validation.checks import FieldValidator, ValidationResult

logger = logging.getLogger(__name__)


class PipelineConfig(BaseModel):
    """Configuration for the processing pipeline."""

    template_registry_path: Path | None = None
    template_schema_path: Path | None = None
    deterministic_ids: bool = False


class GenerationResult(BaseModel):
    """Observations generated for one submission, with their summary."""

    template_id: str
    encounter_id: int | str
    patient_id: int | str
    observed_at: datetime
    observations: list[Observation]
    summary: ProcessingSummary
    diagnostics: GenerationDiagnostics


class SubmissionResult(BaseModel):
    """Outcome of processing and persisting a submission."""

    validation: ValidationResult
    generation: GenerationResult
    observation_ids: list[str]


class ObservationPipeline:
    """Validates submissions and turns them into linked observations.

    Stateless between calls: each call builds its own assembler and
    diagnostics, so concurrent calls for different submissions share
    nothing mutable.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        templates: TemplateStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration.
            templates: Template lookup. Defaults to a TemplateRegistry over
                config.template_registry_path when that is set.
            clock: Current-time source used when observed_at is not given.
        """
        self.config = config or PipelineConfig()
        self.clock = clock or utc_now

        if templates is None and self.config.template_registry_path is not None:
            templates = TemplateRegistry(
                self.config.template_registry_path,
                schema_path=self.config.template_schema_path,
            )
        self.templates = templates

        self.validator = FieldValidator()
        self.linker = RelationshipLinker()
        self.summary_builder = SummaryBuilder()

    def validate_submission(
        self,
        template: FormTemplate,
        data: dict[str, Any],
    ) -> ValidationResult:
        """Validate a raw data bag.

        Raises:
            ValidationError: With every failing field.
        """
        return self.validator.validate(template, data)

    def generate_observations(
        self,
        template: FormTemplate,
        validated_data: dict[str, Any],
        encounter_id: int | str,
        patient_id: int | str,
        observer_id: int | str | None,
        observed_at: datetime | None = None,
        field_count: int | None = None,
    ) -> GenerationResult:
        """Generate, link and summarize observations for validated data.

        Args:
            template: The form template.
            validated_data: Output of validate_submission.
            encounter_id: Owning encounter.
            patient_id: Owning patient.
            observer_id: Who recorded the submission.
            observed_at: Observation time. Defaults to the pipeline clock.
            field_count: Fields in the original bag, if it differed from
                the validated bag.

        Returns:
            GenerationResult with observations, summary and diagnostics.
        """
        observed_at = observed_at or self.clock()
        collector = DiagnosticsCollector(template.template_id)
        assembler = ObservationAssembler(deterministic_ids=self.config.deterministic_ids)

        observations = assembler.assemble(
            template=template,
            validated_data=validated_data,
            encounter_id=encounter_id,
            patient_id=patient_id,
            observer_id=observer_id,
            observed_at=observed_at,
            collector=collector,
        )
        self.linker.link(observations, template.mapping.observation_relationships, collector)

        summary = self.summary_builder.summarize(
            observations,
            field_count if field_count is not None else len(validated_data),
            calculated_codes=template.calculated_codes(),
        )

        return GenerationResult(
            template_id=template.template_id,
            encounter_id=encounter_id,
            patient_id=patient_id,
            observed_at=observed_at,
            observations=observations,
            summary=summary,
            diagnostics=collector.finalize(),
        )

    def get_template(self, template_id: str, version: str | None = None) -> FormTemplate:
        """Look up a template through the configured template store."""
        if self.templates is None:
            raise ConfigurationError(
                "No template store configured; pass templates= or set template_registry_path"
            )
        return self.templates.get(template_id, version)

    def process_submission(
        self,
        template_id: str,
        data: dict[str, Any],
        encounter_id: int | str,
        patient_id: int | str,
        observer_id: int | str | None,
        store: ObservationStore,
        template_version: str | None = None,
        observed_at: datetime | None = None,
    ) -> SubmissionResult:
        """Validate, generate and persist one submission.

        The store receives the whole batch in a single call; nothing is
        persisted when validation fails.

        Raises:
            TemplateNotFoundError: If the template cannot be found.
            ValidationError: If the data bag is rejected.
        """
        template = self.get_template(template_id, template_version)
        validation = self.validate_submission(template, data)
        generation = self.generate_observations(
            template,
            validation.validated_data,
            encounter_id=encounter_id,
            patient_id=patient_id,
            observer_id=observer_id,
            observed_at=observed_at,
            field_count=validation.field_count,
        )

        observation_ids = store.create_many(generation.observations)

        logger.info(
            "Clinical form completed: encounter=%s patient=%s template=%s@%s observations=%d",
            encounter_id,
            patient_id,
            template.template_id,
            template.version,
            len(generation.observations),
        )

        return SubmissionResult(
            validation=validation,
            generation=generation,
            observation_ids=observation_ids,
        )
