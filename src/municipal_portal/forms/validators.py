"""Built-in validators for extra-field values."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Callable

from municipal_portal.services.models import FieldDefinition, FieldKind

# Registry of validator functions: name -> callable(value, field) -> str | None
# Returns an error message string on failure, None on success.
VALIDATORS: dict[str, Callable[[Any, FieldDefinition], str | None]] = {}

# Kind checks keyed by field kind; kinds without an entry accept any text.
KIND_VALIDATORS: dict[FieldKind, str] = {
    FieldKind.NUMBER: "number",
    FieldKind.DATE: "date",
    FieldKind.TIME: "time",
    FieldKind.SELECT: "option",
}


def register(name: str):
    """Decorator to register a validator function."""
    def decorator(fn):
        VALIDATORS[name] = fn
        return fn
    return decorator


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@register("required")
def validate_required(value: Any, field: FieldDefinition | None = None) -> str | None:
    if is_blank(value):
        return "Ce champ est obligatoire."
    return None


@register("pattern")
def validate_pattern(value: Any, field: FieldDefinition) -> str | None:
    if is_blank(value) or field.pattern is None:
        return None
    if not re.fullmatch(field.pattern, str(value)):
        return f"Format invalide pour {field.label}."
    return None


@register("number")
def validate_number(value: Any, field: FieldDefinition | None = None) -> str | None:
    if is_blank(value):
        return None
    try:
        float(value)
    except (TypeError, ValueError):
        return "Veuillez saisir un nombre valide."
    return None


@register("date")
def validate_date(value: Any, field: FieldDefinition | None = None) -> str | None:
    if is_blank(value):
        return None
    try:
        datetime.strptime(str(value), "%Y-%m-%d")
    except ValueError:
        return "Veuillez saisir une date valide (AAAA-MM-JJ)."
    return None


@register("time")
def validate_time(value: Any, field: FieldDefinition | None = None) -> str | None:
    if is_blank(value):
        return None
    if not re.fullmatch(r"([01]\d|2[0-3]):[0-5]\d", str(value)):
        return "Veuillez saisir une heure valide (HH:MM)."
    return None


@register("option")
def validate_option(value: Any, field: FieldDefinition) -> str | None:
    if is_blank(value) or not field.options:
        return None
    if value not in field.option_values:
        return f"Choix invalide pour {field.label}."
    return None
