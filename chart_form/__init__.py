"""chart-form: Form validation and clinical observation generation engine."""

__version__ = "0.1.0"

# These imports must come after __version__ to avoid a circular import
from chart_form.errors import (
    ChartFormError,
    ConfigurationError,
    FieldError,
    TemplateNotFoundError,
    ValidationError,
)
from chart_form.pipeline import (
    GenerationResult,
    ObservationPipeline,
    PipelineConfig,
)

__all__ = [
    "__version__",
    "ChartFormError",
    "ConfigurationError",
    "FieldError",
    "GenerationResult",
    "ObservationPipeline",
    "PipelineConfig",
    "TemplateNotFoundError",
    "ValidationError",
]
