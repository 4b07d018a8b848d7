"""Client for the same-origin upload relay endpoints."""

import io
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx

from travel_admin.adapters.http_errors import extract_error_message
from travel_admin.domain.uploads import MediaAsset, MediaFile, UploadErrorKind
from travel_admin.errors import UploadError

ProgressCallback = Callable[[int | None], None]

_REJECTION_CODES = {
    UploadErrorKind.UNSUPPORTED_TYPE.value: UploadErrorKind.UNSUPPORTED_TYPE,
    UploadErrorKind.TOO_LARGE.value: UploadErrorKind.TOO_LARGE,
}


class UploadRelayClient(Protocol):
    """Interface for sending files through the upload relay."""

    async def upload(
        self,
        file: MediaFile,
        folder: str,
        on_progress: ProgressCallback | None = None,
    ) -> MediaAsset:
        """Upload one file and return its durable reference."""


class _ProgressReader(io.BytesIO):
    """In-memory file that reports how much of itself has been read."""

    def __init__(self, content: bytes, on_progress: ProgressCallback) -> None:
        super().__init__(content)
        self._total = len(content)
        self._on_progress = on_progress

    def read(self, size: int | None = -1) -> bytes:
        chunk = super().read(size)
        if chunk:
            if self._total:
                self._on_progress(round(self.tell() * 100 / self._total))
            else:
                self._on_progress(None)
        return chunk


@dataclass
class HttpxUploadRelayClient(UploadRelayClient):
    """Upload relay client implemented with httpx multipart requests."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, app_base_url: str) -> "HttpxUploadRelayClient":
        """Create a relay client bound to the dashboard server."""
        return cls(http_client=httpx.AsyncClient(base_url=app_base_url))

    async def upload(
        self,
        file: MediaFile,
        folder: str,
        on_progress: ProgressCallback | None = None,
    ) -> MediaAsset:
        """POST /api/upload with byte-level progress when requested."""
        body: bytes | io.BytesIO = file.content
        if on_progress is not None:
            body = _ProgressReader(file.content, on_progress)
        response = await self._post(
            "/api/upload",
            files={"image": (file.filename, body, file.content_type)},
            data={"folder": folder},
        )
        payload = _json_body(response)
        url = payload.get("url")
        public_id = payload.get("public_id")
        if not isinstance(url, str) or not url:
            raise UploadError(
                UploadErrorKind.PROTOCOL_ERROR,
                "Invalid response from server: missing image URL",
                detail=response.text,
            )
        return MediaAsset(url=url, public_id=str(public_id or ""))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _post(self, path: str, **kwargs: object) -> httpx.Response:
        try:
            response = await self.http_client.post(path, timeout=60, **kwargs)
        except httpx.TransportError as exc:
            raise UploadError(
                UploadErrorKind.NETWORK_ERROR,
                "Could not reach the upload service",
                detail=repr(exc),
            ) from exc
        if response.is_success:
            return response
        try:
            payload = response.json()
        except ValueError:
            payload = None
        message = extract_error_message(payload) or "Upload failed"
        code = payload.get("code") if isinstance(payload, dict) else None
        kind = UploadErrorKind.UPSTREAM_ERROR
        if isinstance(code, str):
            kind = _REJECTION_CODES.get(code, kind)
        raise UploadError(
            kind, message, detail=f"HTTP {response.status_code}: {response.text}"
        )


def _json_body(response: httpx.Response) -> dict[str, object]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise UploadError(
            UploadErrorKind.PROTOCOL_ERROR,
            "Invalid response from server",
            detail=response.text,
        ) from exc
    if not isinstance(payload, dict):
        raise UploadError(
            UploadErrorKind.PROTOCOL_ERROR,
            "Invalid response from server",
            detail=response.text,
        )
    return payload
