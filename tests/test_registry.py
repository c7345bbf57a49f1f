"""Tests for template models and the template registry."""

import json
from pathlib import Path

import pytest

from chart_form.errors import ConfigurationError, TemplateNotFoundError
from chart_form.registry import (
    ComplexSubtype,
    FieldType,
    FormTemplate,
    TemplateRegistry,
    ValueKind,
    check_template,
    load_template,
)


@pytest.fixture
def minimal_document() -> dict:
    return {
        "type": "form_template",
        "template_id": "mini",
        "version": "1.0.0",
        "name": "Mini",
        "form_schema": {
            "sections": [
                {"id": "main", "fields": [{"id": "note", "type": "text_field"}]}
            ]
        },
        "mapping": {
            "field_mappings": {
                "note": {"observation_concept_id": 1, "value_field": "string"}
            }
        },
    }


class TestTemplateRegistry:
    """Tests for loading templates from the registry directory."""

    def test_load_vital_signs(self, template_registry: TemplateRegistry) -> None:
        """Test loading the vital-signs-basic template."""
        template = template_registry.get("vital-signs-basic", "1.0.0")

        assert isinstance(template, FormTemplate)
        assert template.template_id == "vital-signs-basic"
        assert template.version == "1.0.0"
        assert "temperature" in template.field_ids
        assert template.mapping.field_mappings["temperature"].observation_code == "TEMP"

    def test_get_without_version_returns_latest(self, template_registry: TemplateRegistry) -> None:
        """Test that omitting the version resolves to the highest version."""
        template = template_registry.get("physical-exam-general")
        assert template.version == "1.1.0"

    def test_list_templates(self, template_registry: TemplateRegistry) -> None:
        assert template_registry.list_templates() == ["physical-exam-general", "vital-signs-basic"]

    def test_list_versions_sorted(self, template_registry: TemplateRegistry) -> None:
        assert template_registry.list_versions("physical-exam-general") == ["1.0.0", "1.1.0"]

    def test_list_versions_numeric_order(self, tmp_path: Path, minimal_document: dict) -> None:
        """Test that version parts compare as numbers, not strings."""
        template_dir = tmp_path / "templates" / "mini"
        template_dir.mkdir(parents=True)
        for version in ("1.2.0", "1.10.0", "1.9.0"):
            document = {**minimal_document, "version": version}
            (template_dir / (version.replace(".", "-") + ".json")).write_text(json.dumps(document))

        registry = TemplateRegistry(tmp_path)
        assert registry.list_versions("mini") == ["1.2.0", "1.9.0", "1.10.0"]
        assert registry.get("mini").version == "1.10.0"

    def test_missing_template_raises(self, template_registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateNotFoundError):
            template_registry.get("does-not-exist", "1.0.0")

    def test_missing_template_latest_raises(self, template_registry: TemplateRegistry) -> None:
        with pytest.raises(TemplateNotFoundError):
            template_registry.get("does-not-exist")

    def test_caching(self, template_registry: TemplateRegistry) -> None:
        """Test that the same object is returned on repeated loads."""
        first = template_registry.get("vital-signs-basic", "1.0.0")
        second = template_registry.get("vital-signs-basic", "1.0.0")
        assert first is second

    def test_missing_registry_lists_nothing(self, tmp_path: Path) -> None:
        registry = TemplateRegistry(tmp_path / "nowhere")
        assert registry.list_templates() == []
        assert registry.list_versions("anything") == []


class TestTemplateModels:
    """Tests for template model parsing."""

    def test_field_types_parsed(self, vital_signs_template: FormTemplate) -> None:
        assert vital_signs_template.get_field("temperature").type == FieldType.VITAL_SIGNS
        assert vital_signs_template.get_field("pain_scale").type == FieldType.CLINICAL_SCALE
        assert vital_signs_template.get_field("unknown") is None

    def test_options_from_mapping(self, vital_signs_template: FormTemplate) -> None:
        """Test that {value: label} options are normalized."""
        field = vital_signs_template.get_field("position")
        assert field.option_values() == {"sitting", "standing", "supine"}
        assert field.options[0].label == "Sitting"

    def test_options_from_bare_values(self, make_template) -> None:
        template = make_template([{"id": "score", "type": "select_field", "options": [0, 1, 2]}])
        assert template.get_field("score").option_values() == {"0", "1", "2"}

    def test_value_field_aliases(self, make_template) -> None:
        """Test that storage-slot names normalize to value kinds."""
        template = make_template(
            [{"id": "a", "type": "text_field"}, {"id": "b", "type": "date_field"}],
            {
                "field_mappings": {
                    "a": {"observation_concept_id": 1, "value_field": "value_string"},
                    "b": {"observation_concept_id": 2, "value_field": "datetime"},
                }
            },
        )
        assert template.mapping.field_mappings["a"].value_field == ValueKind.STRING
        assert template.mapping.field_mappings["b"].value_field == ValueKind.TIMESTAMP

    def test_complex_type(self, vital_signs_template: FormTemplate) -> None:
        mapping = vital_signs_template.mapping.field_mappings["blood_pressure"]
        assert mapping.complex_type == ComplexSubtype.BLOOD_PRESSURE

    def test_calculated_codes(self, vital_signs_template: FormTemplate) -> None:
        assert vital_signs_template.calculated_codes() == {"BMI", "MAP", "PP"}

    def test_multi_select_flags(self, make_template) -> None:
        template = make_template(
            [
                {"id": "a", "type": "multi_select_field", "options": ["x"]},
                {"id": "b", "type": "select_field", "options": ["x"], "multiple": True},
                {"id": "c", "type": "select_field", "options": ["x"]},
            ]
        )
        assert template.get_field("a").is_multi_select
        assert template.get_field("b").is_multi_select
        assert not template.get_field("c").is_multi_select


class TestCheckTemplate:
    """Tests for template cross-reference checks."""

    def test_sample_templates_are_sound(self, template_registry: TemplateRegistry) -> None:
        for template_id in template_registry.list_templates():
            for version in template_registry.list_versions(template_id):
                assert check_template(template_registry.get(template_id, version)) == []

    def test_duplicate_field_ids(self, make_template) -> None:
        template = make_template(
            [{"id": "a", "type": "text_field"}, {"id": "a", "type": "number_field"}]
        )
        assert any("Duplicate field id: a" in p for p in check_template(template))

    def test_mapping_to_undeclared_field(self, make_template) -> None:
        template = make_template(
            [{"id": "a", "type": "text_field"}],
            {"field_mappings": {"ghost": {"observation_concept_id": 1, "value_field": "string"}}},
        )
        assert any("ghost" in p for p in check_template(template))

    def test_unknown_formula(self, make_template) -> None:
        template = make_template(
            [{"id": "a", "type": "number_field"}],
            {
                "calculated_observations": {
                    "weird": {"calculation": "no_such_formula", "observation_concept_id": 1}
                }
            },
        )
        assert any("no_such_formula" in p for p in check_template(template))

    def test_empty_group(self, make_template) -> None:
        template = make_template(
            [{"id": "a", "type": "number_field"}],
            {"grouped_observations": {"G": {"fields": [], "observation_concept_id": 1}}},
        )
        assert any("has no fields" in p for p in check_template(template))


class TestLoadTemplate:
    """Tests for load_template."""

    def test_valid_document(self, minimal_document: dict, template_schema_path: Path) -> None:
        schema = json.loads(template_schema_path.read_text())
        template = load_template(minimal_document, schema)
        assert template.template_id == "mini"

    def test_schema_violation(self, minimal_document: dict, template_schema_path: Path) -> None:
        schema = json.loads(template_schema_path.read_text())
        del minimal_document["name"]
        with pytest.raises(ConfigurationError, match="Template validation failed"):
            load_template(minimal_document, schema, source="mini.json")

    def test_unknown_field_type(self, minimal_document: dict) -> None:
        minimal_document["form_schema"]["sections"][0]["fields"][0]["type"] = "slider"
        with pytest.raises(ConfigurationError):
            load_template(minimal_document)

    def test_cross_reference_problem(self, minimal_document: dict) -> None:
        minimal_document["mapping"]["field_mappings"]["missing"] = {
            "observation_concept_id": 2,
            "value_field": "number",
        }
        with pytest.raises(ConfigurationError, match="undeclared field: missing"):
            load_template(minimal_document)
