"""Authenticated JSON client for the travel platform REST API."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

import httpx

from travel_admin.adapters.http_errors import raise_for_error
from travel_admin.errors import AuthError, NetworkError
from travel_admin.services.retry import RetryPolicy, Sleep, attempt_with_retry

_logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
TokenProvider = Callable[[], str | None]
AuthFailureHandler = Callable[[], Awaitable[None]]


@dataclass
class DashboardApiClient:
    """Sends authenticated requests and applies the shared failure rules.

    Reads that fail at the transport level are retried under ``read_retry``.
    Writes are sent once. A 401/403 answer hands control to
    ``on_auth_failure`` (normally a local sign-out) before raising AuthError.
    """

    base_url: str
    http_client: httpx.AsyncClient
    token_provider: TokenProvider
    on_auth_failure: AuthFailureHandler
    read_retry: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Sleep = field(default=asyncio.sleep)

    @classmethod
    def create(
        cls,
        base_url: str,
        token_provider: TokenProvider,
        on_auth_failure: AuthFailureHandler,
        read_retry: RetryPolicy | None = None,
    ) -> "DashboardApiClient":
        """Create an API client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            token_provider=token_provider,
            on_auth_failure=on_auth_failure,
            read_retry=read_retry or RetryPolicy(),
        )

    async def request(
        self,
        endpoint: str,
        method: HttpMethod = "GET",
        payload: dict[str, object] | None = None,
    ) -> dict[str, object]:
        """Send one request and return the decoded JSON object."""
        token = self.token_provider()
        if not token and method != "GET":
            raise AuthError("Authentication required")
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        url = f"{self.base_url}{endpoint}"

        async def send() -> httpx.Response:
            _logger.info("Making %s request to %s", method, url)
            try:
                return await self.http_client.request(
                    method, url, json=payload, headers=headers, timeout=30
                )
            except httpx.TransportError as exc:
                raise NetworkError(
                    "API request failed. Please try again later.", detail=repr(exc)
                ) from exc

        if method == "GET":
            response = await attempt_with_retry(
                send,
                self.read_retry,
                retry_on=(NetworkError,),
                sleep=self.sleep,
                description=f"GET {endpoint}",
            )
        else:
            response = await send()

        try:
            raise_for_error(response, f"API error ({response.status_code})")
        except AuthError:
            _logger.warning("API rejected credentials for %s %s", method, endpoint)
            await self.on_auth_failure()
            raise
        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            _logger.warning("Non-JSON success body from %s %s", method, endpoint)
            return {}
        return data if isinstance(data, dict) else {"results": data}

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
