"""Callable protocol for chart-form."""

from chart_form.callable.execute import execute
from chart_form.callable.result import CallableResult

__all__ = ["CallableResult", "execute"]
