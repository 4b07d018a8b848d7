"""Remote identity API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from travel_admin.adapters.http_errors import parse_json, raise_for_error
from travel_admin.domain.session import AuthGrant
from travel_admin.errors import NetworkError, ProtocolError


class IdentityClient(Protocol):
    """Interface for the identity API consumed by the session manager."""

    async def login(self, email: str, password: str) -> AuthGrant:
        """Exchange credentials for tokens and a profile."""

    async def register(self, payload: dict[str, str]) -> tuple[AuthGrant, str | None]:
        """Create an account and return its grant plus the API message."""

    async def verify_email(self, email: str, code: str) -> str | None:
        """Confirm an email address and return the API message."""

    async def logout(self, access_token: str, refresh_token: str) -> None:
        """Invalidate the refresh token remotely."""


@dataclass
class HttpxIdentityClient(IdentityClient):
    """Identity API client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxIdentityClient":
        """Create an identity client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def login(self, email: str, password: str) -> AuthGrant:
        """Log in with email and password."""
        payload = await self._post(
            "/users/login/", {"email": email, "password": password}, "Login failed"
        )
        return _parse_grant(payload)

    async def register(self, payload: dict[str, str]) -> tuple[AuthGrant, str | None]:
        """Register a new account."""
        body = await self._post("/users/register/", payload, "Registration failed")
        return _parse_grant(body), _message(body)

    async def verify_email(self, email: str, code: str) -> str | None:
        """Submit an email verification code."""
        body = await self._post(
            "/users/verify_email/",
            {"email": email, "code": code},
            "Verification failed",
        )
        return _message(body)

    async def logout(self, access_token: str, refresh_token: str) -> None:
        """Invalidate the session on the identity API."""
        await self._post(
            "/users/logout/",
            {"refresh": refresh_token},
            "Logout failed",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _post(
        self,
        path: str,
        payload: dict[str, str],
        fallback: str,
        headers: dict[str, str] | None = None,
    ) -> object:
        try:
            response = await self.http_client.post(
                f"{self.base_url}{path}", json=payload, headers=headers, timeout=15
            )
        except httpx.TransportError as exc:
            raise NetworkError(fallback, detail=repr(exc)) from exc
        raise_for_error(response, fallback)
        if not response.content:
            return {}
        return parse_json(response)


def _parse_grant(body: object) -> AuthGrant:
    """Read tokens and user from the ``data`` envelope."""
    data = body.get("data") if isinstance(body, dict) else None
    try:
        return AuthGrant.model_validate(data)
    except PydanticValidationError as exc:
        raise ProtocolError(
            "Unexpected response from identity service", detail=str(exc)
        ) from exc


def _message(body: object) -> str | None:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None
