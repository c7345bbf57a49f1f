"""Collaborator protocols.

The engine reads templates and hands observations to a store, but owns
neither. These protocols describe the shape it expects from the
collaborators that do.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from chart_form.registry.models import FormTemplate

if TYPE_CHECKING:
    from chart_form.builders.observation import Observation


@runtime_checkable
class TemplateStore(Protocol):
    """Template lookup keyed by an opaque template identifier."""

    def get(self, template_id: str, version: str | None = None) -> FormTemplate:
        """Return the template, or raise TemplateNotFoundError."""
        ...


@runtime_checkable
class ObservationStore(Protocol):
    """Persistence for one submission's observations.

    Implementations must record the whole batch or nothing.
    """

    def create_many(self, observations: list["Observation"]) -> list[str]:
        """Persist the batch and return the assigned identifiers."""
        ...


class Clock(Protocol):
    """Source of the current time."""

    def __call__(self) -> datetime: ...


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)
