"""Cloudinary media host client using the signed upload REST API."""

import hashlib
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from travel_admin.domain.uploads import MediaAsset, MediaFile
from travel_admin.errors import NetworkError, ProtocolError, UpstreamError

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


class MediaHost(Protocol):
    """Interface for the third-party host that stores uploaded images."""

    async def upload_image(
        self, file: MediaFile, folder: str, public_id: str
    ) -> MediaAsset:
        """Store an image and return its durable reference."""


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Compute a Cloudinary request signature."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()  # noqa: S324


@dataclass
class HttpxCloudinaryClient(MediaHost):
    """Cloudinary client implemented with httpx."""

    cloud_name: str
    api_key: str
    api_secret: str
    http_client: httpx.AsyncClient
    base_url: str = CLOUDINARY_API_BASE
    clock: Callable[[], float] = field(default=time.time)

    @classmethod
    def create(
        cls, cloud_name: str, api_key: str, api_secret: str
    ) -> "HttpxCloudinaryClient":
        """Create a Cloudinary client with a managed httpx session."""
        return cls(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            http_client=httpx.AsyncClient(),
        )

    async def upload_image(
        self, file: MediaFile, folder: str, public_id: str
    ) -> MediaAsset:
        """Upload an image with overwrite enabled."""
        params = {
            "folder": folder,
            "overwrite": "true",
            "public_id": public_id,
            "timestamp": str(int(self.clock())),
        }
        data = {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }
        url = f"{self.base_url}/{self.cloud_name}/image/upload"
        try:
            response = await self.http_client.post(
                url,
                data=data,
                files={"file": (file.filename, file.content, file.content_type)},
                timeout=60,
            )
        except httpx.TransportError as exc:
            raise NetworkError("Media host unreachable", detail=repr(exc)) from exc
        if not response.is_success:
            raise UpstreamError(
                _error_message(response),
                status_code=response.status_code,
                detail=response.text,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProtocolError(
                "Media host returned invalid JSON", detail=response.text
            ) from exc
        secure_url = payload.get("secure_url") if isinstance(payload, dict) else None
        stored_id = payload.get("public_id") if isinstance(payload, dict) else None
        if not secure_url or not stored_id:
            raise ProtocolError("No result from media host", detail=response.text)
        return MediaAsset(url=str(secure_url), public_id=str(stored_id))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"Media host rejected upload ({response.status_code})"
