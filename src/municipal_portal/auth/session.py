"""Session/identity collaborator Protocol and a static implementation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from municipal_portal.core.errors import AuthError


class CurrentUser(BaseModel):
    """The authenticated resident."""

    id: str
    email: str = ""
    name: str = ""
    phone: str | None = None


@runtime_checkable
class SessionProvider(Protocol):
    """Supplies bearer tokens and the signed-in user."""

    @property
    def current_user(self) -> CurrentUser | None: ...

    async def get_token(self) -> str | None: ...


class StaticSessionProvider:
    """Session provider holding a fixed user and token.

    Used for embedding the core behind an identity provider that has already
    resolved the session, and in tests.
    """

    def __init__(self, user: CurrentUser | None = None, token: str | None = None) -> None:
        self._user = user
        self._token = token

    @property
    def current_user(self) -> CurrentUser | None:
        return self._user

    async def get_token(self) -> str | None:
        return self._token

    def sign_out(self) -> None:
        self._user = None
        self._token = None


async def require_token(session: SessionProvider) -> str:
    """Return a bearer token or raise AuthError."""
    token = await session.get_token()
    if not token:
        raise AuthError("No session token available")
    return token


def require_user(session: SessionProvider) -> CurrentUser:
    user = session.current_user
    if user is None:
        raise AuthError("No signed-in user")
    return user
