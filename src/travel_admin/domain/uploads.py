"""Domain models for image uploads."""

from dataclasses import dataclass, field
from enum import StrEnum

DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_ALLOWED_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/svg+xml", "image/webp"}
)


class UploadState(StrEnum):
    """Lifecycle states of a single upload slot."""

    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class UploadErrorKind(StrEnum):
    """Classified upload failures."""

    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    NETWORK_ERROR = "network_error"
    UPSTREAM_ERROR = "upstream_error"
    PROTOCOL_ERROR = "protocol_error"


_TRANSITIONS: dict[UploadState, frozenset[UploadState]] = {
    UploadState.IDLE: frozenset({UploadState.VALIDATING}),
    UploadState.VALIDATING: frozenset({UploadState.REJECTED, UploadState.UPLOADING}),
    UploadState.UPLOADING: frozenset({UploadState.SUCCEEDED, UploadState.FAILED}),
    UploadState.SUCCEEDED: frozenset({UploadState.IDLE}),
    UploadState.REJECTED: frozenset(),
    UploadState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class MediaFile:
    """A user-selected file ready for upload."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class UploadConstraints:
    """Client-side limits applied before any network call."""

    max_bytes: int = DEFAULT_MAX_BYTES
    allowed_types: frozenset[str] = DEFAULT_ALLOWED_TYPES


@dataclass(frozen=True)
class MediaAsset:
    """Durable media reference returned by the media host."""

    url: str
    public_id: str


class InvalidTransitionError(ValueError):
    """Raised when an upload task is moved along an illegal edge."""


def validate_file(
    file: MediaFile, constraints: UploadConstraints
) -> UploadErrorKind | None:
    """Return the rejection reason for a file, or None when it may be uploaded."""
    if file.content_type not in constraints.allowed_types:
        return UploadErrorKind.UNSUPPORTED_TYPE
    if file.size > constraints.max_bytes:
        return UploadErrorKind.TOO_LARGE
    return None


def describe_rejection(kind: UploadErrorKind, constraints: UploadConstraints) -> str:
    """Return a short user-facing explanation of a pre-flight rejection."""
    if kind is UploadErrorKind.UNSUPPORTED_TYPE:
        allowed = ", ".join(sorted(constraints.allowed_types))
        return f"Please upload a valid image file ({allowed})"
    if kind is UploadErrorKind.TOO_LARGE:
        megabytes = constraints.max_bytes / (1024 * 1024)
        return f"Please upload an image smaller than {megabytes:g}MB"
    return "There was an error uploading your image. Please try again."


@dataclass
class UploadTask:
    """Tracks one file from selection to a durable URL or a terminal failure."""

    file: MediaFile
    constraints: UploadConstraints = field(default_factory=UploadConstraints)
    state: UploadState = UploadState.IDLE
    progress: int | None = 0
    result_url: str | None = None
    public_id: str | None = None
    error: UploadErrorKind | None = None

    def _move(self, target: UploadState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Cannot move upload from {self.state} to {target}"
            )
        self.state = target

    def begin_validation(self) -> None:
        self._move(UploadState.VALIDATING)

    def reject(self, kind: UploadErrorKind) -> None:
        self._move(UploadState.REJECTED)
        self.error = kind

    def begin_upload(self) -> None:
        self._move(UploadState.UPLOADING)
        self.progress = 0

    def report_progress(self, progress: int | None) -> None:
        """Record transfer progress; None marks it indeterminate."""
        if self.state is not UploadState.UPLOADING:
            raise InvalidTransitionError("Progress reported outside an upload")
        self.progress = None if progress is None else max(0, min(100, progress))

    def succeed(self, asset: MediaAsset) -> None:
        self._move(UploadState.SUCCEEDED)
        self.progress = 100
        self.result_url = asset.url
        self.public_id = asset.public_id

    def fail(self, kind: UploadErrorKind) -> None:
        self._move(UploadState.FAILED)
        self.error = kind

    def clear(self) -> None:
        """Return a succeeded slot to idle when the user removes the image."""
        self._move(UploadState.IDLE)
        self.progress = 0
        self.result_url = None
        self.public_id = None

    @property
    def is_terminal(self) -> bool:
        return self.state in {UploadState.REJECTED, UploadState.FAILED}


@dataclass
class Gallery:
    """Ordered image URLs sharing a capacity limit."""

    max_files: int = 10
    images: list[str] = field(default_factory=list)

    @property
    def capacity_remaining(self) -> int:
        return max(0, self.max_files - len(self.images))

    def add(self, urls: list[str]) -> list[str]:
        """Append non-empty URLs up to capacity and return those accepted."""
        accepted = [url for url in urls if url][: self.capacity_remaining]
        self.images.extend(accepted)
        return accepted

    def remove(self, url: str) -> bool:
        """Remove a URL locally; removing an absent URL is a no-op."""
        if url not in self.images:
            return False
        self.images.remove(url)
        return True

    def remove_at(self, index: int) -> str | None:
        if not 0 <= index < len(self.images):
            return None
        return self.images.pop(index)
