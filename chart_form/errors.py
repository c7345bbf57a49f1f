"""Exception types raised by chart-form.

Only ValidationError is meant to reach the submitting caller as
"your input was rejected". ConfigurationError is raised when a template
is loaded, never on the normal validate/generate path.
"""

from pydantic import BaseModel


class ChartFormError(Exception):
    """Base class for chart-form errors."""

    pass


class FieldError(BaseModel):
    """A single failing field rule."""

    field: str
    rule: str
    reason: str


class ValidationError(ChartFormError):
    """Raised when a data bag fails validation against a template.

    Carries every failing field, not just the first one found.
    """

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        fields = ", ".join(error.field for error in errors)
        super().__init__(f"Validation failed for {len(errors)} field(s): {fields}")

    @property
    def fields(self) -> list[str]:
        """IDs of the failing fields, in template order."""
        return [error.field for error in self.errors]

    def reasons_for(self, field_id: str) -> list[str]:
        """Reasons reported for a single field."""
        return [error.reason for error in self.errors if error.field == field_id]

    def to_dict(self) -> dict[str, list[str]]:
        """Field id -> reasons mapping, suitable for a response body."""
        result: dict[str, list[str]] = {}
        for error in self.errors:
            result.setdefault(error.field, []).append(error.reason)
        return result


class ConfigurationError(ChartFormError):
    """Raised when a template is structurally invalid."""

    pass


class TemplateNotFoundError(ChartFormError):
    """Raised when a template is not found in the registry."""

    pass
