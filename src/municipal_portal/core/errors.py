"""Error taxonomy shared by every portal component."""

from __future__ import annotations

GENERIC_REMOTE_MESSAGE = "Le service est temporairement indisponible. Veuillez réessayer."


class PortalError(Exception):
    """Base class for all portal errors."""


class ConfigError(PortalError):
    """The service catalog and the caller disagree (unknown id, bad schema)."""


class ValidationError(PortalError):
    """User input failed field validation.

    ``errors`` maps a field name to its list of messages.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid fields: {fields}")


class AuthError(PortalError):
    """No usable session token is available."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class UploadError(PortalError):
    """An attachment was rejected or failed to upload."""

    def __init__(self, message: str, file_name: str | None = None) -> None:
        self.file_name = file_name
        super().__init__(message)


class RemoteError(PortalError):
    """The backend rejected a request or could not be reached.

    ``status`` is the HTTP status code, or 0 for transport failures.
    """

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        self.message = message or ""
        super().__init__(f"HTTP {status}: {self.message}" if self.message else f"HTTP {status}")

    @property
    def user_message(self) -> str:
        return self.message or GENERIC_REMOTE_MESSAGE

    @property
    def not_found(self) -> bool:
        return self.status == 404


class ClosedClaimError(PortalError):
    """A message was sent to a resolved or rejected claim."""

    def __init__(self, claim_id: str, status: str) -> None:
        self.claim_id = claim_id
        self.status = status
        super().__init__(f"Claim {claim_id!r} is {status}; messaging is closed")
