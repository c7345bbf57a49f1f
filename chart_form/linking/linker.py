"""Relationship linker for generated observations.

Sets parent references on child observations according to the
template's relationship rules. Rules are best-effort annotations: a rule
whose parent was not generated is skipped.
"""

import logging

from chart_form.builders.observation import Observation
from chart_form.diagnostics.collector import DiagnosticsCollector
from chart_form.registry.models import RelationshipRule

logger = logging.getLogger(__name__)


class RelationshipLinker:
    """Links child observations to parent observations by code.

    Rules are applied in declaration order. When two rules claim the same
    child, the later rule wins.
    """

    def link(
        self,
        observations: list[Observation],
        rules: list[RelationshipRule],
        collector: DiagnosticsCollector | None = None,
    ) -> int:
        """Set parent references in place.

        Args:
            observations: Observations of one submission.
            rules: Relationship rules from the template mapping.
            collector: Optional diagnostics collector for skipped rules.

        Returns:
            Number of parent assignments made.
        """
        assignments = 0

        for rule in rules:
            if not rule.parent_code or not rule.child_codes:
                continue

            parent = next((obs for obs in observations if obs.code == rule.parent_code), None)
            if parent is None:
                if collector is not None:
                    collector.add_warning(
                        stage="linking",
                        code="PARENT_NOT_FOUND",
                        message=f"No observation with parent code {rule.parent_code}",
                        details={"parent_code": rule.parent_code},
                    )
                continue

            child_codes = set(rule.child_codes)
            for obs in observations:
                if obs is parent or obs.code not in child_codes:
                    continue
                obs.parent_id = parent.observation_id
                assignments += 1

        logger.debug("Linked %d child observation(s)", assignments)
        return assignments
