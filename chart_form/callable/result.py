"""CallableResult model for the chart-form callable protocol."""

from __future__ import annotations

from pydantic import BaseModel, model_validator


class CallableResult(BaseModel):
    """Result returned by the chart-form execute() interface.

    Exactly one of `items` or `errors` is set: observations (or the
    validated bag) on success, field errors when validation rejects the
    submission.

    Attributes:
        schema_version: Version of the CallableResult schema.
        items: Output records (inline payload).
        errors: Field-level validation failures.
        stats: Processing statistics.
    """

    schema_version: str = "1.0"
    items: list[dict] | None = None
    errors: list[dict] | None = None
    stats: dict = {}

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def validate_items_xor_errors(self) -> CallableResult:
        """Ensure exactly one of items or errors is set."""
        has_items = self.items is not None
        has_errors = self.errors is not None

        if has_items and has_errors:
            raise ValueError("Cannot set both 'items' and 'errors'; use exactly one")
        if not has_items and not has_errors:
            raise ValueError("Must set exactly one of 'items' or 'errors'")

        return self

    def to_dict(self) -> dict:
        """Convert to dictionary, excluding None values."""
        result: dict = {"schema_version": self.schema_version}
        if self.items is not None:
            result["items"] = self.items
        if self.errors is not None:
            result["errors"] = self.errors
        if self.stats:
            result["stats"] = self.stats
        return result
