"""Derived finding views."""

from findingscope.views.pipeline import (
    clear_filter,
    derive_view,
    is_filtered,
    severity_options,
    update_filter,
)

__all__ = [
    "clear_filter",
    "derive_view",
    "is_filtered",
    "severity_options",
    "update_filter",
]
