"""Processing summary for generated observations."""

from collections import Counter
from collections.abc import Iterable

from chart_form.builders.observation import Observation
from chart_form.diagnostics.models import ProcessingSummary


class SummaryBuilder:
    """Builds a read-only report of what a generation run produced."""

    def summarize(
        self,
        observations: list[Observation],
        field_count: int,
        calculated_codes: Iterable[str] = (),
    ) -> ProcessingSummary:
        """Summarize a list of observations.

        Args:
            observations: The generated observations.
            field_count: Number of fields in the original data bag.
            calculated_codes: Codes of the template's calculated observations.

        Returns:
            ProcessingSummary with counts by code and by value type.
        """
        calculated = set(calculated_codes)
        code_counts = Counter(obs.code for obs in observations if obs.code)
        value_type_counts = Counter(obs.value_type for obs in observations)

        return ProcessingSummary(
            total_form_fields=field_count,
            observations_created=len(observations),
            observation_types=dict(code_counts),
            value_types=dict(value_type_counts),
            has_complex_values=value_type_counts.get("complex", 0) > 0,
            has_calculated_values=any(obs.code in calculated for obs in observations),
        )
