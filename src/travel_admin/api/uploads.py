"""Upload relay endpoints that forward images to the media host."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, File, Form, Request, UploadFile, status
from fastapi.responses import JSONResponse

from travel_admin.api.models import MultipleUploadResponse, UploadResponse
from travel_admin.domain.uploads import MediaFile
from travel_admin.errors import UploadError, UpstreamError

if TYPE_CHECKING:
    from travel_admin.containers import AppContainer

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("", response_model=None)
async def upload_image(
    request: Request,
    image: UploadFile | None = File(default=None),
    folder: str | None = Form(default=None),
) -> UploadResponse | JSONResponse:
    """Relay one image to the media host."""
    if image is None:
        return _error(status.HTTP_400_BAD_REQUEST, "No image provided")
    container: AppContainer = request.app.state.container
    media_file = await _to_media_file(image)
    try:
        asset = await container.media_relay_service.relay_single(media_file, folder)
    except UploadError as exc:
        _logger.warning("Rejected upload %s: %s", media_file.filename, exc)
        return _error(status.HTTP_400_BAD_REQUEST, exc.message, code=exc.kind.value)
    except UpstreamError:
        _logger.exception(
            "Upload error", extra={"upload_filename": media_file.filename}
        )
        return _error(status.HTTP_502_BAD_GATEWAY, "Failed to upload image")
    except Exception:
        _logger.exception(
            "Unexpected upload error", extra={"upload_filename": media_file.filename}
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload image")
    return UploadResponse(url=asset.url, public_id=asset.public_id)


@router.post("/multiple", response_model=None)
async def upload_images(
    request: Request,
    files: list[UploadFile] | None = File(default=None),
    folder: str | None = Form(default=None),
) -> MultipleUploadResponse | JSONResponse:
    """Relay several images, one after another."""
    if not files:
        _logger.error("No files provided in the request")
        return _error(status.HTTP_400_BAD_REQUEST, "No files provided")
    container: AppContainer = request.app.state.container
    media_files = [await _to_media_file(file) for file in files]
    try:
        assets = await container.media_relay_service.relay_multiple(
            media_files, folder
        )
    except UploadError as exc:
        _logger.warning("Rejected batch upload: %s", exc)
        return _error(status.HTTP_400_BAD_REQUEST, exc.message, code=exc.kind.value)
    except UpstreamError as exc:
        _logger.exception("Error uploading batch to media host")
        return _error(
            status.HTTP_502_BAD_GATEWAY,
            "Failed to upload images",
            details=exc.detail or exc.message,
        )
    except Exception:
        _logger.exception("Unexpected error uploading batch")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload images")
    _logger.info("Successfully uploaded %s files", len(assets))
    return MultipleUploadResponse(
        urls=[asset.url for asset in assets],
        public_ids=[asset.public_id for asset in assets],
    )


async def _to_media_file(upload: UploadFile) -> MediaFile:
    content = await upload.read()
    return MediaFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        content=content,
    )


def _error(status_code: int, message: str, **extra: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})
