"""Async HTTP client for the remote claims backend."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from municipal_portal.core.config import ApiConfig
from municipal_portal.core.errors import RemoteError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_response(model: type[M], data: Any) -> M:
    """Validate a response body, reporting a malformed one as ``RemoteError(502)``."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        logger.warning("Malformed %s from backend: %s", model.__name__, exc)
        raise RemoteError(
            502, f"Malformed {model.__name__} in response ({exc.error_count()} error(s))"
        ) from exc


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {resp.status_code}: {resp.reason_phrase}"


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` adding bearer auth and error mapping.

    Non-2xx responses become ``RemoteError(status, message)``, transport
    failures become ``RemoteError(0, ...)``. Requests are never retried here.
    """

    def __init__(
        self,
        config: ApiConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ApiConfig()
        self._http = http or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(self.config.timeout_seconds),
        )

    async def request(
        self,
        method: str,
        path: str,
        token: str,
        *,
        json: Any = None,
    ) -> Any:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            resp = await self._http.request(method, path, headers=headers, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise RemoteError(0, str(exc) or "Network error") from exc

        if resp.is_error:
            raise RemoteError(resp.status_code, _error_message(resp))

        content_type = resp.headers.get("content-type", "")
        if not resp.content or "application/json" not in content_type:
            return None
        return resp.json()

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
