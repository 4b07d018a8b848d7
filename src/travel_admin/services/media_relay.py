"""Server-side relay that forwards uploads to the media host."""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass, field

from travel_admin.adapters.cloudinary_client import MediaHost
from travel_admin.domain.uploads import (
    MediaAsset,
    MediaFile,
    UploadConstraints,
    describe_rejection,
    validate_file,
)
from travel_admin.errors import (
    NetworkError,
    ProtocolError,
    UploadError,
    UpstreamError,
)
from travel_admin.services.retry import RetryPolicy, Sleep, attempt_with_retry

_logger = logging.getLogger(__name__)

_RETRYABLE = (NetworkError, UpstreamError, ProtocolError)


def new_public_id() -> str:
    """Return a unique media id of the form ``<epoch-millis>_<hex>``."""
    return f"{int(time.time() * 1000)}_{secrets.token_hex(3)}"


@dataclass
class MediaRelayService:
    """Validates files a second time and uploads them with bounded retry."""

    media_host: MediaHost
    constraints: UploadConstraints
    retry_policy: RetryPolicy
    default_folder: str = "ethiopian-travel"
    sleep: Sleep = field(default=asyncio.sleep)

    def check(self, file: MediaFile) -> None:
        """Raise UploadError when the file breaks the server-side limits."""
        rejection = validate_file(file, self.constraints)
        if rejection is not None:
            raise UploadError(
                rejection, describe_rejection(rejection, self.constraints)
            )

    async def relay_single(
        self, file: MediaFile, folder: str | None = None
    ) -> MediaAsset:
        """Validate and upload one file."""
        self.check(file)
        return await self._upload(file, folder or self.default_folder)

    async def relay_multiple(
        self, files: list[MediaFile], folder: str | None = None
    ) -> list[MediaAsset]:
        """Validate every file, then upload them one after another."""
        for file in files:
            self.check(file)
        target = folder or self.default_folder
        _logger.info("Relaying %s files to folder %s", len(files), target)
        assets: list[MediaAsset] = []
        for index, file in enumerate(files, start=1):
            _logger.info(
                "Relaying file %s/%s: %s (%s, %s bytes)",
                index,
                len(files),
                file.filename,
                file.content_type,
                file.size,
            )
            assets.append(await self._upload(file, target))
        return assets

    async def _upload(self, file: MediaFile, folder: str) -> MediaAsset:
        public_id = new_public_id()

        async def send() -> MediaAsset:
            return await self.media_host.upload_image(file, folder, public_id)

        try:
            asset = await attempt_with_retry(
                send,
                self.retry_policy,
                retry_on=_RETRYABLE,
                sleep=self.sleep,
                description=f"Media upload {folder}/{public_id}",
            )
        except _RETRYABLE as exc:
            raise UpstreamError("Failed to upload image", detail=str(exc)) from exc
        _logger.info("Media upload stored %s", asset.public_id)
        return asset
