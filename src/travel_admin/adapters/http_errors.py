"""Translate httpx responses and failures into the error taxonomy."""

import json

import httpx

from travel_admin.errors import AuthError, ProtocolError, UpstreamError

_AUTH_STATUSES = {httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN}
_MAX_DETAIL_CHARS = 500


def extract_error_message(payload: object) -> str | None:
    """Pick the most useful message from an error body."""
    if not isinstance(payload, dict):
        return None
    for key in ("detail", "message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    errors = payload.get("errors")
    if errors:
        return json.dumps(errors)
    return None


def parse_json(response: httpx.Response) -> object:
    """Decode a JSON body or raise ProtocolError."""
    try:
        return response.json()
    except ValueError as exc:
        raise ProtocolError(
            "Unexpected response from server",
            detail=_truncate(response.text),
        ) from exc


def raise_for_error(response: httpx.Response, fallback: str) -> None:
    """Raise AuthError or UpstreamError for non-success responses."""
    if response.is_success:
        return
    try:
        payload = response.json()
    except ValueError:
        payload = None
    message = extract_error_message(payload) or fallback
    detail = f"HTTP {response.status_code}: {_truncate(response.text)}"
    if response.status_code in _AUTH_STATUSES:
        raise AuthError(message, detail=detail)
    raise UpstreamError(message, status_code=response.status_code, detail=detail)


def _truncate(text: str) -> str:
    if len(text) > _MAX_DETAIL_CHARS:
        return f"{text[:_MAX_DETAIL_CHARS]}..."
    return text
