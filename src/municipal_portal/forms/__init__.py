"""Dynamic claim form evaluation: field visibility and validation."""

from municipal_portal.forms.evaluator import (
    field_errors,
    is_submittable,
    is_visible,
    prune_hidden,
    validate_field,
    visible_fields,
)

__all__ = [
    "field_errors",
    "is_submittable",
    "is_visible",
    "prune_hidden",
    "validate_field",
    "visible_fields",
]
