"""Registry modules for loading form templates."""

from chart_form.registry.models import (
    CalculatedObservation,
    ComplexSubtype,
    DefaultValues,
    DependsOn,
    FieldDefinition,
    FieldMapping,
    FieldOption,
    FieldType,
    FormSchema,
    FormSection,
    FormTemplate,
    GroupedObservation,
    MappingConfig,
    RelationshipRule,
    ValueKind,
)
from chart_form.registry.templates import TemplateRegistry, check_template, load_template

__all__ = [
    "TemplateRegistry",
    "check_template",
    "load_template",
    "CalculatedObservation",
    "ComplexSubtype",
    "DefaultValues",
    "DependsOn",
    "FieldDefinition",
    "FieldMapping",
    "FieldOption",
    "FieldType",
    "FormSchema",
    "FormSection",
    "FormTemplate",
    "GroupedObservation",
    "MappingConfig",
    "RelationshipRule",
    "ValueKind",
]
