"""Pydantic models for form templates and their observation mapping."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class FieldType(str, Enum):
    """Archetype of a form field."""

    TEXT = "text_field"
    TEXTAREA = "textarea_field"
    NUMBER = "number_field"
    EMAIL = "email"
    DATE = "date_field"
    SELECT = "select_field"
    MULTI_SELECT = "multi_select_field"
    CHECKBOX = "checkbox_field"
    DATE_RANGE = "date_range_field"
    TIME = "time_field"
    URL = "url_field"
    VITAL_SIGNS = "vital_signs"
    MEDICATION_DOSAGE = "medication_dosage"
    CLINICAL_SCALE = "clinical_scale"


class ValueKind(str, Enum):
    """Value slot an observation populates."""

    STRING = "string"
    NUMBER = "number"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    COMPLEX = "complex"


class ComplexSubtype(str, Enum):
    """Encoded value formats understood by the complex value interpreter."""

    BLOOD_PRESSURE = "blood_pressure"
    MEDICATION_DOSAGE = "medication_dosage"
    VITAL_SIGNS_SET = "vital_signs_set"


# Storage-slot names used by older mapping files
_VALUE_KIND_ALIASES = {
    "value_string": "string",
    "value_number": "number",
    "value_text": "text",
    "value_datetime": "timestamp",
    "value_complex": "complex",
    "datetime": "timestamp",
}


class FieldOption(BaseModel):
    """One allowed value of a select field."""

    value: str
    label: str | None = None


class DependsOn(BaseModel):
    """Makes a field required only while another field holds a given value."""

    field: str
    value: Any


class FieldDefinition(BaseModel):
    """A single field of a form section."""

    id: str
    type: FieldType
    label: str | None = None
    required: bool = False
    min_value: float | None = None
    max_value: float | None = None
    max_length: int | None = None
    options: list[FieldOption] = Field(default_factory=list)
    multiple: bool = False
    depends_on: DependsOn | None = None
    vital_type: str | None = None
    min_scale: int = 0
    max_scale: int = 10
    unit: str | None = None
    help_text: str | None = None

    @field_validator("options", mode="before")
    @classmethod
    def normalize_options(cls, value: Any) -> Any:
        """Accept {value: label} mappings and bare value lists."""
        if value is None:
            return []
        if isinstance(value, dict):
            return [{"value": str(k), "label": v} for k, v in value.items()]
        if isinstance(value, list):
            return [
                {**item, "value": str(item.get("value"))}
                if isinstance(item, dict)
                else {"value": str(item)}
                for item in value
            ]
        return value

    @property
    def display_name(self) -> str:
        """Label if present, else the field id."""
        return self.label or self.id

    @property
    def is_multi_select(self) -> bool:
        """Whether the field takes a list of option values."""
        return self.type == FieldType.MULTI_SELECT or (
            self.type == FieldType.SELECT and self.multiple
        )

    def option_values(self) -> set[str]:
        """The set of allowed option values, as strings."""
        return {option.value for option in self.options}


class FormSection(BaseModel):
    """An ordered group of fields."""

    id: str
    title: str | None = None
    description: str | None = None
    fields: list[FieldDefinition] = Field(default_factory=list)


class FormSchema(BaseModel):
    """The field layout of a form."""

    version: str | None = None
    sections: list[FormSection] = Field(default_factory=list)


class FieldMapping(BaseModel):
    """How one form field becomes an observation."""

    observation_concept_id: int | str
    observation_code: str | None = None
    value_field: ValueKind
    unit: str | None = None
    reference_range: dict[str, Any] | str | None = None
    body_site_id: int | str | None = None
    complex_type: ComplexSubtype | None = None

    @field_validator("value_field", mode="before")
    @classmethod
    def normalize_value_field(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _VALUE_KIND_ALIASES.get(value, value)
        return value


class GroupedObservation(BaseModel):
    """Several fields bundled into one complex observation."""

    fields: list[str]
    observation_concept_id: int | str
    observation_code: str | None = None
    observation_status: str | None = None


class CalculatedObservation(BaseModel):
    """An observation derived from other fields by a named formula."""

    calculation: str
    required_fields: list[str] = Field(default_factory=list)
    inputs: dict[str, str] = Field(default_factory=dict)
    observation_concept_id: int | str
    observation_code: str | None = None
    unit: str | None = None
    observation_status: str | None = None


class RelationshipRule(BaseModel):
    """Links child observation codes to a parent observation code."""

    parent_code: str | None = None
    child_codes: list[str] = Field(default_factory=list)


class DefaultValues(BaseModel):
    """Values applied to every generated observation unless overridden."""

    observation_status: str = "final"
    body_site_id: int | str | None = None


class MappingConfig(BaseModel):
    """Observation mapping configuration of a template."""

    field_mappings: dict[str, FieldMapping] = Field(default_factory=dict)
    grouped_observations: dict[str, GroupedObservation] = Field(default_factory=dict)
    calculated_observations: dict[str, CalculatedObservation] = Field(default_factory=dict)
    observation_relationships: list[RelationshipRule] = Field(default_factory=list)
    default_values: DefaultValues = Field(default_factory=DefaultValues)


class FormTemplate(BaseModel):
    """Complete clinical form template."""

    type: Literal["form_template"] = "form_template"
    template_id: str
    version: str
    name: str
    title: str | None = None
    description: str | None = None
    category: str | None = None
    form_schema: FormSchema
    mapping: MappingConfig = Field(default_factory=MappingConfig)

    def iter_fields(self) -> list[FieldDefinition]:
        """All field definitions in section order."""
        return [field for section in self.form_schema.sections for field in section.fields]

    def get_field(self, field_id: str) -> FieldDefinition | None:
        """Get a field definition by its ID."""
        for field in self.iter_fields():
            if field.id == field_id:
                return field
        return None

    @property
    def field_ids(self) -> list[str]:
        """Declared field IDs in section order."""
        return [field.id for field in self.iter_fields()]

    def calculated_codes(self) -> set[str]:
        """Observation codes produced by calculated observations."""
        return {
            calc.observation_code or calc_id
            for calc_id, calc in self.mapping.calculated_observations.items()
        }
