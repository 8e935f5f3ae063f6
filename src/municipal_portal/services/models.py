"""Service catalog models: service definitions and their extra fields."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FieldKind(StrEnum):
    """Input kinds an extra field can take."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    SELECT = "select"
    TEXTAREA = "textarea"
    QR = "qr"


class FieldOption(BaseModel):
    """A single choice of a select field."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class FieldVisibility(BaseModel):
    """Show a field only while another field holds one of the listed values."""

    model_config = ConfigDict(frozen=True)

    depends_on: str
    show_when: frozenset[str]

    @field_validator("show_when", mode="before")
    @classmethod
    def _coerce_single_value(cls, value):
        if isinstance(value, str):
            return frozenset({value})
        return value


class FieldDefinition(BaseModel):
    """Definition of a service-specific form field."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    placeholder: str | None = None
    required: bool = False
    options: tuple[FieldOption, ...] = ()
    pattern: str | None = None
    visibility: FieldVisibility | None = None

    @property
    def option_values(self) -> frozenset[str]:
        return frozenset(o.value for o in self.options)


class ServiceDefinition(BaseModel):
    """A municipal service a claim can be filed against."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    code: str
    description: str = ""
    fields: tuple[FieldDefinition, ...] = Field(default_factory=tuple)

    @property
    def has_extra_fields(self) -> bool:
        return len(self.fields) > 0

    def field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None
