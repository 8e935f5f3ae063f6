"""Read-only registry of municipal services loaded from the YAML catalog."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

import yaml

from municipal_portal.core.config import CatalogConfig
from municipal_portal.core.errors import ConfigError
from municipal_portal.services.models import (
    FieldDefinition,
    FieldKind,
    FieldOption,
    FieldVisibility,
    ServiceDefinition,
)

_DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "catalog.yml"


def _parse_field(data: dict[str, Any]) -> FieldDefinition:
    visibility = data.get("visibility")
    return FieldDefinition(
        name=data["name"],
        label=data.get("label", data["name"]),
        kind=FieldKind(data.get("kind", "text")),
        placeholder=data.get("placeholder"),
        required=data.get("required", False),
        options=tuple(FieldOption(**o) for o in data.get("options", [])),
        pattern=data.get("pattern"),
        visibility=FieldVisibility(**visibility) if visibility else None,
    )


def _parse_service(data: dict[str, Any]) -> ServiceDefinition:
    return ServiceDefinition(
        id=data["id"],
        name=data.get("name", data["id"]),
        code=data["code"],
        description=data.get("description", ""),
        fields=tuple(_parse_field(f) for f in data.get("fields", [])),
    )


def _check_service(service: ServiceDefinition) -> None:
    seen: set[str] = set()
    for field in service.fields:
        if field.name in seen:
            raise ConfigError(f"Duplicate field {field.name!r} in service {service.id!r}")
        if field.options and field.kind != FieldKind.SELECT:
            raise ConfigError(
                f"Field {field.name!r} in service {service.id!r} has options but is not a select"
            )
        if field.pattern is not None:
            try:
                re.compile(field.pattern)
            except re.error as exc:
                raise ConfigError(
                    f"Invalid pattern for field {field.name!r} in service {service.id!r}: {exc}"
                ) from exc
        # Visibility is evaluated in a single pass, so the controlling
        # field must already be declared.
        if field.visibility is not None and field.visibility.depends_on not in seen:
            raise ConfigError(
                f"Field {field.name!r} in service {service.id!r} depends on "
                f"{field.visibility.depends_on!r}, which is not declared before it"
            )
        seen.add(field.name)


class ServiceRegistry:
    """Catalog of service definitions keyed by internal id.

    Populated once and never mutated afterwards.
    """

    def __init__(self, services: Iterable[ServiceDefinition]) -> None:
        self._services: dict[str, ServiceDefinition] = {}
        self._by_code: dict[str, ServiceDefinition] = {}
        for service in services:
            if service.id in self._services:
                raise ConfigError(f"Duplicate service id {service.id!r}")
            if service.code in self._by_code:
                raise ConfigError(f"Duplicate service code {service.code!r}")
            _check_service(service)
            self._services[service.id] = service
            self._by_code[service.code] = service

    @classmethod
    def from_yaml(cls, path: str | Path) -> ServiceRegistry:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Service catalog not found: {path}")
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        try:
            services = [_parse_service(s) for s in data.get("services", [])]
        except (KeyError, ValueError) as exc:
            raise ConfigError(f"Malformed service catalog {path}: {exc}") from exc
        return cls(services)

    @property
    def services(self) -> list[ServiceDefinition]:
        return list(self._services.values())

    def get(self, service_id: str) -> ServiceDefinition | None:
        return self._services.get(service_id)

    def lookup(self, service_id: str) -> ServiceDefinition:
        """Return the service definition for ``service_id``.

        Raises:
            ConfigError: If the id is not in the catalog.
        """
        service = self._services.get(service_id)
        if service is None:
            raise ConfigError(f"Unknown service: {service_id!r}")
        return service

    def code_for(self, service_id: str) -> str:
        return self.lookup(service_id).code

    def id_for_code(self, code: str) -> str | None:
        service = self._by_code.get(code)
        return service.id if service else None

    def name_for_code(self, code: str) -> str | None:
        service = self._by_code.get(code)
        return service.name if service else None

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._services

    def __len__(self) -> int:
        return len(self._services)


@lru_cache(maxsize=1)
def default_registry() -> ServiceRegistry:
    """Registry loaded from the configured (or packaged) catalog, once per process."""
    configured = CatalogConfig().path
    return ServiceRegistry.from_yaml(configured or _DEFAULT_CATALOG_PATH)
