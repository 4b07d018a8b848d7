"""Client-side upload pipeline: validation, transfer and gallery bookkeeping."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from travel_admin.adapters.upload_relay_client import (
    ProgressCallback,
    UploadRelayClient,
)
from travel_admin.domain.uploads import (
    Gallery,
    MediaAsset,
    MediaFile,
    UploadConstraints,
    UploadErrorKind,
    UploadTask,
    describe_rejection,
    validate_file,
)
from travel_admin.errors import UploadError
from travel_admin.services.notifications import NotificationCenter, NotificationVariant

_logger = logging.getLogger(__name__)

BatchProgressCallback = Callable[[int, int | None], None]

_FAILURE_TITLES = {
    UploadErrorKind.UNSUPPORTED_TYPE: "Invalid file type",
    UploadErrorKind.TOO_LARGE: "File too large",
}
_RETRY_HINT = "There was an error uploading your image. Please try again."


@dataclass(frozen=True)
class UploadOutcome:
    """Result of uploading a single file."""

    task: UploadTask
    asset: MediaAsset | None = None
    error: UploadError | None = None

    @property
    def ok(self) -> bool:
        return self.asset is not None

    @property
    def url(self) -> str | None:
        return self.asset.url if self.asset else None


@dataclass(frozen=True)
class BatchUploadOutcome:
    """Result of a sequential multi-file upload."""

    urls: list[str]
    error: UploadError | None = None
    dropped: int = 0
    tasks: list[UploadTask] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class UploadPipeline:
    """Turns selected files into durable media URLs."""

    relay: UploadRelayClient
    notifications: NotificationCenter
    constraints: UploadConstraints = field(default_factory=UploadConstraints)
    default_folder: str = "ethiopian-travel"
    gallery_max_files: int = 10

    def new_gallery(self, images: Sequence[str] = ()) -> Gallery:
        """Start a gallery with the configured capacity."""
        gallery = Gallery(max_files=self.gallery_max_files)
        gallery.add(list(images))
        return gallery

    def validate(
        self, file: MediaFile, constraints: UploadConstraints | None = None
    ) -> UploadErrorKind | None:
        """Pre-flight check; None means the file may be uploaded."""
        return validate_file(file, constraints or self.constraints)

    async def upload_single(
        self,
        file: MediaFile,
        folder: str | None = None,
        *,
        task: UploadTask | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> UploadOutcome:
        """Validate and upload one file for a single-image slot."""
        task = task or UploadTask(file=file, constraints=self.constraints)
        error = self._preflight(task)
        if error is not None:
            return UploadOutcome(task=task, error=error)
        outcome = await self._transmit(task, folder, on_progress)
        if outcome.ok:
            self.notifications.notify(
                "Image uploaded successfully", variant=NotificationVariant.SUCCESS
            )
        return outcome

    async def upload_multiple(
        self,
        files: Sequence[MediaFile],
        folder: str | None = None,
        capacity_remaining: int = 10,
        *,
        on_progress: BatchProgressCallback | None = None,
    ) -> BatchUploadOutcome:
        """Upload files one at a time, stopping at the first failure.

        Files beyond ``capacity_remaining`` are dropped from the batch. The
        whole batch is validated before anything is sent.
        """
        batch = list(files)[: max(0, capacity_remaining)]
        dropped = len(files) - len(batch)
        if dropped:
            _logger.info("Dropping %s files over gallery capacity", dropped)
        tasks = [UploadTask(file=file, constraints=self.constraints) for file in batch]
        for task in tasks:
            error = self._preflight(task)
            if error is not None:
                return BatchUploadOutcome(
                    urls=[], error=error, dropped=dropped, tasks=tasks
                )

        urls: list[str] = []
        for index, task in enumerate(tasks):
            outcome = await self._transmit(
                task, folder, _for_item(on_progress, index)
            )
            if not outcome.ok:
                return BatchUploadOutcome(
                    urls=urls, error=outcome.error, dropped=dropped, tasks=tasks
                )
            urls.append(outcome.asset.url)
        if urls:
            self.notifications.notify(
                f"{len(urls)} images uploaded", variant=NotificationVariant.SUCCESS
            )
        return BatchUploadOutcome(urls=urls, dropped=dropped, tasks=tasks)

    async def add_to_gallery(
        self, gallery: Gallery, files: Sequence[MediaFile], folder: str | None = None
    ) -> BatchUploadOutcome:
        """Upload into a gallery's free slots and append whatever succeeded."""
        outcome = await self.upload_multiple(
            files, folder, capacity_remaining=gallery.capacity_remaining
        )
        gallery.add(outcome.urls)
        return outcome

    def remove_from_gallery(self, gallery: Gallery, url: str) -> bool:
        """Remove an image locally; the media host copy is left untouched."""
        removed = gallery.remove(url)
        if removed:
            self.notifications.notify(
                "Image removed from gallery", variant=NotificationVariant.SUCCESS
            )
        return removed

    def _preflight(self, task: UploadTask) -> UploadError | None:
        task.begin_validation()
        rejection = validate_file(task.file, task.constraints)
        if rejection is None:
            return None
        task.reject(rejection)
        error = UploadError(rejection, describe_rejection(rejection, task.constraints))
        _logger.warning(
            "Rejected %s (%s, %s bytes): %s",
            task.file.filename,
            task.file.content_type,
            task.file.size,
            rejection,
        )
        self._notify_failure(error)
        return error

    async def _transmit(
        self,
        task: UploadTask,
        folder: str | None,
        on_progress: ProgressCallback | None,
    ) -> UploadOutcome:
        task.begin_upload()

        def track(value: int | None) -> None:
            task.report_progress(value)
            if on_progress is not None:
                on_progress(task.progress)

        try:
            asset = await self.relay.upload(
                task.file, folder or self.default_folder, track
            )
        except UploadError as exc:
            error = exc
        except Exception as exc:
            _logger.exception("Unexpected upload failure for %s", task.file.filename)
            error = UploadError(
                UploadErrorKind.UPSTREAM_ERROR, "Upload failed", detail=repr(exc)
            )
        else:
            task.succeed(asset)
            _logger.info("Uploaded %s to %s", task.file.filename, asset.url)
            return UploadOutcome(task=task, asset=asset)

        task.fail(error.kind)
        _logger.error(
            "Upload of %s failed (%s): %s", task.file.filename, error.kind, error
        )
        self._notify_failure(error)
        return UploadOutcome(task=task, error=error)

    def _notify_failure(self, error: UploadError) -> None:
        title = _FAILURE_TITLES.get(error.kind, "Upload failed")
        description = (
            error.message if error.kind in _FAILURE_TITLES else _RETRY_HINT
        )
        self.notifications.notify(
            title, description, variant=NotificationVariant.DESTRUCTIVE
        )


def _for_item(
    on_progress: BatchProgressCallback | None, index: int
) -> ProgressCallback | None:
    if on_progress is None:
        return None

    def report(value: int | None) -> None:
        on_progress(index, value)

    return report
