"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from chart_form.registry import FormTemplate, TemplateRegistry


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def schemas_dir(project_root: Path) -> Path:
    """Return the schemas directory."""
    return project_root / "schemas"


@pytest.fixture
def template_registry_path(project_root: Path) -> Path:
    """Return the template registry path."""
    return project_root / "template-registry"


@pytest.fixture
def template_schema_path(schemas_dir: Path) -> Path:
    """Return the form template schema path."""
    return schemas_dir / "form_template.schema.json"


@pytest.fixture
def template_registry(template_registry_path: Path, template_schema_path: Path) -> TemplateRegistry:
    """A registry over the sample templates, with schema validation."""
    return TemplateRegistry(template_registry_path, schema_path=template_schema_path)


@pytest.fixture
def vital_signs_template(template_registry: TemplateRegistry) -> FormTemplate:
    """Load the vital-signs-basic template."""
    return template_registry.get("vital-signs-basic", "1.0.0")


@pytest.fixture
def observed_at() -> datetime:
    """A fixed observation time."""
    return datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def complete_vitals() -> dict:
    """A complete, valid vital-signs submission."""
    return {
        "temperature": 37.0,
        "systolic_bp": 120,
        "diastolic_bp": 80,
        "heart_rate": 72,
        "respiratory_rate": 16,
        "oxygen_saturation": 98,
        "height": 170,
        "weight": 70,
        "pain_scale": 2,
        "measurement_notes": "Patient resting comfortably",
    }


def _build_template(fields: list[dict], mapping: dict | None = None, **extra) -> FormTemplate:
    """Build a single-section template from field dicts."""
    return FormTemplate.model_validate(
        {
            "template_id": extra.pop("template_id", "test-form"),
            "version": extra.pop("version", "1.0.0"),
            "name": extra.pop("name", "Test Form"),
            "form_schema": {"sections": [{"id": "main", "fields": fields}]},
            "mapping": mapping or {},
            **extra,
        }
    )


@pytest.fixture
def make_template():
    """Factory for small single-section templates."""
    return _build_template
