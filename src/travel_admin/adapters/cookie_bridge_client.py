"""Client for the same-origin session cookie bridge."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from travel_admin.adapters.http_errors import parse_json, raise_for_error
from travel_admin.domain.session import SESSION_COOKIE_NAME
from travel_admin.errors import NetworkError, ProtocolError


class CookieBridgeClient(Protocol):
    """Interface for mirroring the access token into the server-visible cookie."""

    async def is_authenticated(self) -> bool:
        """Return whether the server currently sees the session cookie."""

    async def set_cookie(self, token: str) -> None:
        """Ask the server to set the session cookie."""

    async def clear_cookie(self) -> None:
        """Ask the server to delete the session cookie."""


@dataclass
class HttpxCookieBridgeClient(CookieBridgeClient):
    """Cookie bridge client; the cookie lives in the httpx cookie jar."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, app_base_url: str) -> "HttpxCookieBridgeClient":
        """Create a bridge client bound to the dashboard server."""
        return cls(http_client=httpx.AsyncClient(base_url=app_base_url))

    async def is_authenticated(self) -> bool:
        """Query cookie presence via GET /api/auth."""
        response = await self._send("GET", "/api/auth", "Auth check failed")
        payload = parse_json(response)
        if not isinstance(payload, dict) or "isAuthenticated" not in payload:
            raise ProtocolError("Auth check returned an unexpected payload")
        return bool(payload["isAuthenticated"])

    async def set_cookie(self, token: str) -> None:
        """Set the cookie via POST /api/auth."""
        await self._send(
            "POST", "/api/auth", "Failed to set auth cookie", json={"token": token}
        )

    async def clear_cookie(self) -> None:
        """Delete the cookie via POST /api/auth/logout."""
        try:
            await self._send(
                "POST", "/api/auth/logout", "Failed to clear auth cookie"
            )
        finally:
            self.http_client.cookies.delete(SESSION_COOKIE_NAME)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        fallback: str,
        json: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self.http_client.request(
                method, path, json=json, timeout=10
            )
        except httpx.TransportError as exc:
            raise NetworkError(fallback, detail=repr(exc)) from exc
        raise_for_error(response, fallback)
        return response
