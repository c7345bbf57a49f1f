"""Observation model and assembler.

Builds one observation per populated mapped field, one per grouped
observation with at least one member present, and one per calculated
observation whose inputs are all present. These are JSON-serializable
Pydantic models - persistence is handled by the caller.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from chart_form.calculation.evaluator import CalculationEvaluator
from chart_form.coercion.coercer import ValueCoercer
from chart_form.core.values import is_empty
from chart_form.diagnostics.collector import DiagnosticsCollector
from chart_form.registry.models import (
    CalculatedObservation,
    FieldMapping,
    FormTemplate,
    GroupedObservation,
    ValueKind,
)

logger = logging.getLogger(__name__)

VALUE_SLOTS: dict[ValueKind, str] = {
    ValueKind.STRING: "value_string",
    ValueKind.NUMBER: "value_number",
    ValueKind.TEXT: "value_text",
    ValueKind.TIMESTAMP: "value_datetime",
    ValueKind.COMPLEX: "value_complex",
}

ID_NAMESPACE = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")


class Observation(BaseModel):
    """One typed measurement or finding.

    At most one value slot is populated. `parent_id` is a weak reference to
    another observation's id, set only by the relationship linker.
    """

    schema_: str = Field(alias="schema", default="com.chartform.observation.v1")
    observation_id: str
    encounter_id: int | str
    patient_id: int | str
    concept_id: int | str
    code: str
    status: str = "final"
    body_site_id: int | str | None = None
    value_string: str | None = None
    value_number: float | None = None
    value_text: str | None = None
    value_datetime: datetime | None = None
    value_complex: list | dict | None = None
    unit: str | None = None
    reference_range: dict[str, Any] | str | None = None
    observed_at: datetime
    observed_by: int | str | None = None
    parent_id: str | None = None
    source_field: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_single_value_slot(self) -> "Observation":
        """Reject observations with more than one populated value slot."""
        populated = [slot for slot in VALUE_SLOTS.values() if getattr(self, slot) is not None]
        if len(populated) > 1:
            raise ValueError(f"Observation has more than one value slot populated: {populated}")
        return self

    @property
    def value_type(self) -> str:
        """Kind of the populated value slot, or 'unknown'."""
        for kind, slot in VALUE_SLOTS.items():
            if getattr(self, slot) is not None:
                return kind.value
        return "unknown"

    @property
    def value(self) -> Any:
        """The populated value, whichever slot holds it."""
        for slot in VALUE_SLOTS.values():
            current = getattr(self, slot)
            if current is not None:
                return current
        return None


class ObservationAssembler:
    """Assembles observations for one submission from a template.

    Skips are silent for the caller - an unmapped field, an uncoercible
    value, an empty group, or a calculation missing inputs produces no
    observation and no error - but each is recorded in the diagnostics
    collector when one is given.
    """

    def __init__(
        self,
        coercer: ValueCoercer | None = None,
        evaluator: CalculationEvaluator | None = None,
        deterministic_ids: bool = False,
    ) -> None:
        """Initialize the assembler.

        Args:
            coercer: Value coercer for mapped fields.
            evaluator: Evaluator for calculated observations.
            deterministic_ids: If True, generate deterministic UUIDs based on
                               input data (for testing). If False, use random UUIDs.
        """
        self.coercer = coercer or ValueCoercer()
        self.evaluator = evaluator or CalculationEvaluator()
        self.deterministic_ids = deterministic_ids
        self._id_counter = 0

    def _generate_id(self, seed: str = "") -> str:
        """Generate a UUID for an observation."""
        if self.deterministic_ids:
            self._id_counter += 1
            return str(uuid.uuid5(ID_NAMESPACE, f"{seed}:{self._id_counter}"))
        return str(uuid.uuid4())

    def assemble(
        self,
        template: FormTemplate,
        validated_data: dict[str, Any],
        encounter_id: int | str,
        patient_id: int | str,
        observer_id: int | str | None,
        observed_at: datetime,
        collector: DiagnosticsCollector | None = None,
    ) -> list[Observation]:
        """Build all observations for a validated data bag.

        Args:
            template: The form template.
            validated_data: Validated field id -> raw value.
            encounter_id: Owning encounter.
            patient_id: Owning patient.
            observer_id: Who recorded the submission.
            observed_at: When the submission was observed; shared by every observation.
            collector: Optional diagnostics collector for skip reasons.

        Returns:
            Field observations, then grouped, then calculated observations.
        """
        self._id_counter = 0
        collector = collector or DiagnosticsCollector(template.template_id)
        base = {
            "encounter_id": encounter_id,
            "patient_id": patient_id,
            "observed_at": observed_at,
            "observed_by": observer_id,
        }
        seed = f"{encounter_id}:{template.template_id}"

        observations: list[Observation] = []
        observations.extend(
            self._build_field_observations(template, validated_data, base, seed, collector)
        )
        observations.extend(
            self._build_grouped_observations(template, validated_data, base, seed, collector)
        )
        observations.extend(
            self._build_calculated_observations(template, validated_data, base, seed, collector)
        )

        logger.debug(
            "Assembled %d observation(s) for encounter %s from template %s",
            len(observations),
            encounter_id,
            template.template_id,
        )
        return observations

    def _build_field_observations(
        self,
        template: FormTemplate,
        data: dict[str, Any],
        base: dict[str, Any],
        seed: str,
        collector: DiagnosticsCollector,
    ) -> list[Observation]:
        """Build one observation per populated, mapped field."""
        mappings = template.mapping.field_mappings
        defaults = template.mapping.default_values
        observations: list[Observation] = []

        for field_id, raw_value in data.items():
            if is_empty(raw_value):
                continue

            mapping = mappings.get(field_id)
            if mapping is None:
                collector.add_warning(
                    stage="assembly",
                    code="UNMAPPED_FIELD",
                    message=f"Field {field_id} has no observation mapping",
                    field_id=field_id,
                )
                continue

            value = self.coercer.coerce(
                raw_value, mapping.value_field, mapping, now=base["observed_at"]
            )
            if value is None:
                collector.add_warning(
                    stage="coercion",
                    code="UNCOERCIBLE_VALUE",
                    message=(
                        f"Field {field_id} value could not be represented as "
                        f"{mapping.value_field.value}"
                    ),
                    field_id=field_id,
                )
                continue

            observations.append(
                self._build_field_observation(field_id, mapping, value, base, seed, defaults)
            )

        return observations

    def _build_field_observation(
        self,
        field_id: str,
        mapping: FieldMapping,
        value: Any,
        base: dict[str, Any],
        seed: str,
        defaults: Any,
    ) -> Observation:
        code = mapping.observation_code or field_id
        body_site_id = (
            mapping.body_site_id if mapping.body_site_id is not None else defaults.body_site_id
        )
        return Observation(
            observation_id=self._generate_id(f"{seed}:field:{code}"),
            concept_id=mapping.observation_concept_id,
            code=code,
            status=defaults.observation_status,
            body_site_id=body_site_id,
            unit=mapping.unit,
            reference_range=mapping.reference_range,
            source_field=field_id,
            **{VALUE_SLOTS[mapping.value_field]: value},
            **base,
        )

    def _build_grouped_observations(
        self,
        template: FormTemplate,
        data: dict[str, Any],
        base: dict[str, Any],
        seed: str,
        collector: DiagnosticsCollector,
    ) -> list[Observation]:
        """Build one complex observation per group with any member present."""
        observations: list[Observation] = []

        for group_id, group in template.mapping.grouped_observations.items():
            group_value = self._collect_group_value(group, data)
            if not group_value:
                collector.add_warning(
                    stage="assembly",
                    code="EMPTY_GROUP",
                    message=f"Grouped observation {group_id} has no fields present",
                    details={"group_id": group_id},
                )
                continue

            code = group.observation_code or group_id
            observations.append(
                Observation(
                    observation_id=self._generate_id(f"{seed}:group:{code}"),
                    concept_id=group.observation_concept_id,
                    code=code,
                    status=group.observation_status
                    or template.mapping.default_values.observation_status,
                    value_complex=group_value,
                    **base,
                )
            )

        return observations

    def _collect_group_value(
        self,
        group: GroupedObservation,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        """Present member values; absent members are left out, not defaulted."""
        return {
            field_id: data[field_id]
            for field_id in group.fields
            if field_id in data and not is_empty(data[field_id])
        }

    def _build_calculated_observations(
        self,
        template: FormTemplate,
        data: dict[str, Any],
        base: dict[str, Any],
        seed: str,
        collector: DiagnosticsCollector,
    ) -> list[Observation]:
        """Build one number observation per calculation whose inputs are present."""
        observations: list[Observation] = []

        for calc_id, calc in template.mapping.calculated_observations.items():
            value = self._evaluate(calc, data)
            if value is None:
                collector.add_warning(
                    stage="calculation",
                    code="CALCULATION_SKIPPED",
                    message=(
                        f"Calculated observation {calc_id} ({calc.calculation}) "
                        "is missing required inputs"
                    ),
                    details={"calc_id": calc_id, "required_fields": calc.required_fields},
                )
                continue

            code = calc.observation_code or calc_id
            observations.append(
                Observation(
                    observation_id=self._generate_id(f"{seed}:calc:{code}"),
                    concept_id=calc.observation_concept_id,
                    code=code,
                    status=calc.observation_status
                    or template.mapping.default_values.observation_status,
                    value_number=value,
                    unit=calc.unit,
                    **base,
                )
            )

        return observations

    def _evaluate(self, calc: CalculatedObservation, data: dict[str, Any]) -> float | None:
        return self.evaluator.evaluate(
            calc.calculation,
            data,
            required_field_ids=calc.required_fields,
            inputs=calc.inputs,
        )
