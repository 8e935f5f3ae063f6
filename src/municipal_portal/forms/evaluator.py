"""Conditional visibility and submit-readiness for service extra fields.

Visibility is evaluated in a single pass: a field may depend on one other
field, and that field's own visibility is not consulted. Chains longer than
one hop are not supported.
"""

from __future__ import annotations

from typing import Mapping

from municipal_portal.forms.validators import KIND_VALIDATORS, VALIDATORS, is_blank
from municipal_portal.services.models import FieldDefinition, ServiceDefinition


def is_visible(field: FieldDefinition, values: Mapping[str, str]) -> bool:
    """Return True if ``field`` should be shown given the current values."""
    if field.visibility is None:
        return True
    return values.get(field.visibility.depends_on) in field.visibility.show_when


def visible_fields(
    service: ServiceDefinition, values: Mapping[str, str]
) -> list[FieldDefinition]:
    return [f for f in service.fields if is_visible(f, values)]


def validate_field(field: FieldDefinition, value: str | None) -> list[str]:
    """Validate a single value against its field. Returns error messages."""
    if field.required:
        err = VALIDATORS["required"](value, field)
        if err:
            return [err]
    if is_blank(value):
        return []

    errors: list[str] = []
    kind_check = KIND_VALIDATORS.get(field.kind)
    if kind_check is not None:
        err = VALIDATORS[kind_check](value, field)
        if err:
            errors.append(err)
    err = VALIDATORS["pattern"](value, field)
    if err:
        errors.append(err)
    return errors


def field_errors(
    service: ServiceDefinition, values: Mapping[str, str]
) -> dict[str, list[str]]:
    """Errors for every visible field; hidden fields are never checked."""
    errors: dict[str, list[str]] = {}
    for field in visible_fields(service, values):
        field_errs = validate_field(field, values.get(field.name))
        if field_errs:
            errors[field.name] = field_errs
    return errors


def is_submittable(service: ServiceDefinition, values: Mapping[str, str]) -> bool:
    return not field_errors(service, values)


def prune_hidden(service: ServiceDefinition, values: Mapping[str, str]) -> dict[str, str]:
    """Drop answers to hidden fields and blank values."""
    shown = {f.name for f in visible_fields(service, values)}
    return {
        name: value
        for name, value in values.items()
        if name in shown and not is_blank(value)
    }
