"""Pipeline for form submissions."""

from chart_form.pipeline.orchestrator import (
    GenerationResult,
    ObservationPipeline,
    PipelineConfig,
    SubmissionResult,
)

__all__ = [
    "GenerationResult",
    "ObservationPipeline",
    "PipelineConfig",
    "SubmissionResult",
]
