"""Session collaborator contract for the portal core."""

from municipal_portal.auth.session import (
    CurrentUser,
    SessionProvider,
    StaticSessionProvider,
    require_token,
    require_user,
)

__all__ = [
    "CurrentUser",
    "SessionProvider",
    "StaticSessionProvider",
    "require_token",
    "require_user",
]
