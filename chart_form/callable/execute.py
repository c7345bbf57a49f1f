"""Execute interface for the chart-form callable protocol.

Provides the in-proc execute() function: plain dicts in, plain dicts out,
so callers never handle chart-form's model classes.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from chart_form.callable.result import CallableResult
from chart_form.config import get_template_registry_path
from chart_form.core.values import parse_timestamp
from chart_form.diagnostics import ProcessingStatus
from chart_form.errors import ValidationError
from chart_form.pipeline import ObservationPipeline, PipelineConfig
from chart_form.registry import TemplateRegistry, load_template
from chart_form.registry.models import FormTemplate

OPERATIONS = ("validate", "generate")


def _resolve_template(params: dict[str, Any], config: dict[str, Any]) -> FormTemplate:
    template = params.get("template")
    if isinstance(template, dict):
        return load_template(template, source="params.template")

    template_id = params.get("template_id")
    if not template_id:
        raise ValueError("One of 'template' or 'template_id' is required in params")

    registry_path = Path(config.get("template_registry_path") or get_template_registry_path())
    registry = TemplateRegistry(registry_path, schema_path=config.get("template_schema_path"))
    return registry.get(template_id, params.get("template_version"))


def _resolve_observed_at(value: Any) -> datetime | None:
    if value is None:
        return None
    observed_at = parse_timestamp(value)
    if observed_at is None:
        raise ValueError(f"'observed_at' is not a valid timestamp: {value!r}")
    return observed_at


def execute(params: dict[str, Any]) -> dict[str, Any]:
    """Validate a submission or generate its observations.

    Args:
        params: Dictionary containing:
            - operation: "validate" or "generate" (default "generate")
            - template: dict - A template document, or
            - template_id / template_version: str - Resolved via the registry
            - data: dict - The raw data bag
            - encounter_id, patient_id: Required for "generate"
            - observer_id: Optional observer identity
            - observed_at: Optional ISO timestamp (default: now)
            - config: dict - Optional overrides:
                - template_registry_path: str
                - template_schema_path: str
                - deterministic_ids: bool

    Returns:
        CallableResult dict. On "validate", items holds the validated bag;
        on "generate", one item per observation. A rejected submission
        returns errors instead of items.

    Raises:
        ValueError: If required parameters are missing or invalid.
        TemplateNotFoundError: If the template is not in the registry.
        ConfigurationError: If the template is structurally invalid.
    """
    operation = params.get("operation", "generate")
    if operation not in OPERATIONS:
        raise ValueError(f"'operation' must be one of {OPERATIONS}, got {operation!r}")

    data = params.get("data")
    if not isinstance(data, dict):
        raise ValueError("'data' is required in params and must be a dict")

    config = params.get("config", {})
    template = _resolve_template(params, config)
    pipeline = ObservationPipeline(
        PipelineConfig(deterministic_ids=config.get("deterministic_ids", False))
    )

    try:
        validation = pipeline.validate_submission(template, data)
    except ValidationError as e:
        result = CallableResult(
            errors=[error.model_dump() for error in e.errors],
            stats={
                "input": len(data),
                "output": 0,
                "errors": len(e.errors),
                "status": ProcessingStatus.FAILED.value,
            },
        )
        return result.to_dict()

    if operation == "validate":
        result = CallableResult(
            items=[validation.validated_data],
            stats={
                "input": validation.field_count,
                "output": validation.validated_field_count,
                "errors": 0,
            },
        )
        return result.to_dict()

    for key in ("encounter_id", "patient_id"):
        if params.get(key) is None:
            raise ValueError(f"'{key}' is required in params for operation 'generate'")

    generation = pipeline.generate_observations(
        template,
        validation.validated_data,
        encounter_id=params["encounter_id"],
        patient_id=params["patient_id"],
        observer_id=params.get("observer_id"),
        observed_at=_resolve_observed_at(params.get("observed_at")),
        field_count=validation.field_count,
    )

    result = CallableResult(
        items=[obs.model_dump(mode="json", by_alias=True) for obs in generation.observations],
        stats={
            "input": validation.field_count,
            "output": len(generation.observations),
            "errors": 0,
            "summary": generation.summary.model_dump(),
            "status": generation.diagnostics.status.value,
        },
    )
    return result.to_dict()
