"""Municipal service catalog: service definitions and their extra-field schemas."""

from municipal_portal.services.models import (
    FieldDefinition,
    FieldKind,
    FieldOption,
    FieldVisibility,
    ServiceDefinition,
)
from municipal_portal.services.registry import ServiceRegistry, default_registry

__all__ = [
    "FieldDefinition",
    "FieldKind",
    "FieldOption",
    "FieldVisibility",
    "ServiceDefinition",
    "ServiceRegistry",
    "default_registry",
]
