"""Error taxonomy shared by the client and the relay server."""

from travel_admin.domain.uploads import UploadErrorKind


class TravelAdminError(RuntimeError):
    """Base error carrying a short user-facing message and optional detail."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class AuthError(TravelAdminError):
    """Bad credentials or a missing/expired token."""


class ValidationError(TravelAdminError):
    """Client-side field or pre-flight upload check failed."""

    def __init__(
        self,
        message: str,
        *,
        fields: dict[str, str] | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message, detail=detail)
        self.fields = fields or {}


class NetworkError(TravelAdminError):
    """Transport-level failure reaching a remote service."""


class UpstreamError(TravelAdminError):
    """Remote service answered with a non-success status."""

    def __init__(
        self, message: str, *, status_code: int | None = None, detail: str | None = None
    ) -> None:
        super().__init__(message, detail=detail)
        self.status_code = status_code


class ProtocolError(TravelAdminError):
    """Remote service answered with a payload we cannot interpret."""


class UploadError(TravelAdminError):
    """Upload failure classified by kind."""

    def __init__(
        self, kind: UploadErrorKind, message: str, *, detail: str | None = None
    ) -> None:
        super().__init__(message, detail=detail)
        self.kind = kind
