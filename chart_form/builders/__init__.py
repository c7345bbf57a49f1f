"""Builders for Observation output structures."""

from chart_form.builders.observation import (
    VALUE_SLOTS,
    Observation,
    ObservationAssembler,
)

__all__ = [
    "Observation",
    "ObservationAssembler",
    "VALUE_SLOTS",
]
