"""Core shared helpers for chart-form.

Contains raw-value helpers used across validation, coercion and
calculation, and the protocols for the collaborators the engine
depends on but does not implement (template lookup, persistence, clock).
"""

from chart_form.core.values import is_empty, is_numeric, parse_timestamp, to_number
from chart_form.core.protocols import Clock, ObservationStore, TemplateStore, utc_now

__all__ = [
    # Values
    "is_empty",
    "is_numeric",
    "parse_timestamp",
    "to_number",
    # Collaborators
    "Clock",
    "ObservationStore",
    "TemplateStore",
    "utc_now",
]
