"""Pydantic models for the relay endpoints."""

from pydantic import BaseModel


class SetCookieRequest(BaseModel):
    """Body of POST /api/auth."""

    token: str | None = None


class AuthStatus(BaseModel):
    """Body of GET /api/auth."""

    isAuthenticated: bool  # noqa: N815


class UploadResponse(BaseModel):
    """Body of a successful single upload."""

    url: str
    public_id: str


class MultipleUploadResponse(BaseModel):
    """Body of a successful multi-file upload."""

    urls: list[str]
    public_ids: list[str]
