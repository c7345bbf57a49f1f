"""Template registry for loading and caching form templates."""

import json
import logging
from pathlib import Path

import jsonschema
import pydantic

from chart_form.calculation.formulas import FORMULAS
from chart_form.errors import ConfigurationError, TemplateNotFoundError
from chart_form.registry.models import FormTemplate

logger = logging.getLogger(__name__)


def check_template(template: FormTemplate) -> list[str]:
    """Check a parsed template for cross-reference problems.

    Args:
        template: The template to check.

    Returns:
        List of problem descriptions (empty if the template is sound).
    """
    problems: list[str] = []

    seen: set[str] = set()
    for field_id in template.field_ids:
        if field_id in seen:
            problems.append(f"Duplicate field id: {field_id}")
        seen.add(field_id)

    mapping = template.mapping

    for field_id in mapping.field_mappings:
        if field_id not in seen:
            problems.append(f"Field mapping references undeclared field: {field_id}")

    for group_id, group in mapping.grouped_observations.items():
        if not group.fields:
            problems.append(f"Grouped observation {group_id} has no fields")
        for field_id in group.fields:
            if field_id not in seen:
                problems.append(
                    f"Grouped observation {group_id} references undeclared field: {field_id}"
                )

    for calc_id, calc in mapping.calculated_observations.items():
        if calc.calculation not in FORMULAS:
            problems.append(
                f"Calculated observation {calc_id} uses unknown formula: {calc.calculation}"
            )

    return problems


def _version_key(version: str) -> list[tuple[int, int | str]]:
    """Sort key comparing numeric version parts as numbers."""
    return [(0, int(part)) if part.isdigit() else (1, part) for part in version.split(".")]


def load_template(
    data: dict,
    schema: dict | None = None,
    source: str = "<dict>",
) -> FormTemplate:
    """Validate and parse a template document.

    Args:
        data: The raw template document.
        schema: Optional form_template JSON schema to validate against first.
        source: Where the document came from, for error messages.

    Returns:
        The parsed FormTemplate.

    Raises:
        ConfigurationError: If the document is structurally invalid.
    """
    if schema:
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(
                f"Template validation failed for {source}: {e.message}"
            ) from e

    try:
        template = FormTemplate.model_validate(data)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Template is invalid for {source}: {e}") from e

    problems = check_template(template)
    if problems:
        raise ConfigurationError(f"Template is invalid for {source}: " + "; ".join(problems))

    return template


class TemplateRegistry:
    """Registry for loading and caching form templates.

    Loads templates from a directory structure:
        <registry_path>/templates/<template_id>/<version>.json

    Where version uses dashes instead of dots (e.g., 1-0-0.json for 1.0.0).
    """

    def __init__(
        self,
        registry_path: Path | str,
        schema_path: Path | str | None = None,
    ) -> None:
        """Initialize the template registry.

        Args:
            registry_path: Path to the template registry directory.
            schema_path: Optional path to the form_template schema for validation.
        """
        self.registry_path = Path(registry_path)
        self.templates_path = self.registry_path / "templates"
        self._cache: dict[tuple[str, str], FormTemplate] = {}
        self._schema: dict | None = None

        if schema_path:
            with open(schema_path) as f:
                self._schema = json.load(f)

    def _version_to_filename(self, version: str) -> str:
        return version.replace(".", "-") + ".json"

    def _get_template_path(self, template_id: str, version: str) -> Path:
        return self.templates_path / template_id / self._version_to_filename(version)

    def get(self, template_id: str, version: str | None = None) -> FormTemplate:
        """Get a template by ID and version.

        Args:
            template_id: The template identifier (e.g., 'vital-signs-basic').
            version: The version string (e.g., '1.0.0'). Latest if omitted.

        Returns:
            The loaded FormTemplate.

        Raises:
            TemplateNotFoundError: If the template file doesn't exist.
            ConfigurationError: If the template fails validation.
        """
        if version is None:
            return self.get_latest(template_id)

        cache_key = (template_id, version)
        if cache_key in self._cache:
            return self._cache[cache_key]

        template_path = self._get_template_path(template_id, version)
        if not template_path.exists():
            raise TemplateNotFoundError(
                f"Template not found: {template_id}@{version} "
                f"(expected at {template_path})"
            )

        with open(template_path) as f:
            data = json.load(f)

        template = load_template(data, self._schema, source=f"{template_id}@{version}")
        logger.debug("Loaded template %s@%s", template_id, version)
        self._cache[cache_key] = template
        return template

    def list_templates(self) -> list[str]:
        """List all available template IDs."""
        if not self.templates_path.exists():
            return []
        return sorted(d.name for d in self.templates_path.iterdir() if d.is_dir())

    def list_versions(self, template_id: str) -> list[str]:
        """List all available versions for a template."""
        template_path = self.templates_path / template_id
        if not template_path.exists():
            return []
        versions = [f.stem.replace("-", ".") for f in template_path.glob("*.json")]
        return sorted(versions, key=_version_key)

    def get_latest(self, template_id: str) -> FormTemplate:
        """Get the latest version of a template.

        Raises:
            TemplateNotFoundError: If no versions exist.
        """
        versions = self.list_versions(template_id)
        if not versions:
            raise TemplateNotFoundError(f"No versions found for template: {template_id}")
        return self.get(template_id, versions[-1])
