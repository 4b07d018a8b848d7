"""Tests for the client-side upload pipeline."""

import asyncio

from travel_admin.domain.uploads import (
    Gallery,
    UploadErrorKind,
    UploadState,
    UploadTask,
)
from travel_admin.errors import UploadError
from travel_admin.services.notifications import NotificationVariant
from travel_admin.services.uploads import UploadPipeline
from tests.conftest import make_file


def test_validate_makes_no_network_call(upload_pipeline, relay_client) -> None:
    assert upload_pipeline.validate(make_file()) is None
    assert upload_pipeline.validate(make_file("a.txt", "text/plain")) is (
        UploadErrorKind.UNSUPPORTED_TYPE
    )
    assert relay_client.uploaded == []


def test_upload_single_reports_progress_and_url(
    upload_pipeline, relay_client, notifications
) -> None:
    seen: list[int | None] = []

    outcome = asyncio.run(
        upload_pipeline.upload_single(
            make_file("cover.png", "image/png"), "events", on_progress=seen.append
        )
    )

    assert outcome.ok
    assert outcome.url == "https://cdn.example.com/events/cover.png"
    assert outcome.task.state is UploadState.SUCCEEDED
    assert seen == [50, 100]
    assert relay_client.uploaded == [("cover.png", "events")]
    assert notifications.active()[-1].title == "Image uploaded successfully"


def test_upload_single_uses_default_folder(upload_pipeline, relay_client) -> None:
    asyncio.run(upload_pipeline.upload_single(make_file()))

    assert relay_client.uploaded == [("photo.jpg", "ethiopian-travel")]


def test_upload_single_rejects_large_file_before_sending(
    upload_pipeline, relay_client, notifications
) -> None:
    gallery = Gallery()
    big = make_file("big.jpg", size=10 * 1024 * 1024)

    outcome = asyncio.run(upload_pipeline.upload_single(big))
    if outcome.ok:
        gallery.add([outcome.url])

    assert outcome.error.kind is UploadErrorKind.TOO_LARGE
    assert outcome.task.state is UploadState.REJECTED
    assert relay_client.uploaded == []
    assert gallery.images == []
    latest = notifications.active()[-1]
    assert latest.title == "File too large"
    assert latest.variant is NotificationVariant.DESTRUCTIVE


def test_upload_single_reports_relay_failure(
    upload_pipeline, relay_client, notifications
) -> None:
    relay_client.failures["photo.jpg"] = UploadError(
        UploadErrorKind.NETWORK_ERROR, "Could not reach the upload service"
    )

    outcome = asyncio.run(upload_pipeline.upload_single(make_file()))

    assert not outcome.ok
    assert outcome.error.kind is UploadErrorKind.NETWORK_ERROR
    assert outcome.task.state is UploadState.FAILED
    assert notifications.active()[-1].title == "Upload failed"


def test_upload_single_classifies_unexpected_errors(
    upload_pipeline, relay_client
) -> None:
    relay_client.failures["photo.jpg"] = RuntimeError("boom")

    outcome = asyncio.run(upload_pipeline.upload_single(make_file()))

    assert outcome.error.kind is UploadErrorKind.UPSTREAM_ERROR


def test_upload_single_reuses_cleared_task(upload_pipeline) -> None:
    task = UploadTask(file=make_file())
    first = asyncio.run(upload_pipeline.upload_single(task.file, task=task))
    task.clear()

    second = asyncio.run(upload_pipeline.upload_single(task.file, task=task))

    assert first.ok
    assert second.ok
    assert task.state is UploadState.SUCCEEDED


def test_upload_multiple_truncates_to_capacity(
    upload_pipeline, relay_client, notifications
) -> None:
    files = [make_file(f"img{i}.jpg") for i in range(5)]
    progress: list[tuple[int, int | None]] = []

    outcome = asyncio.run(
        upload_pipeline.upload_multiple(
            files,
            "packages",
            capacity_remaining=3,
            on_progress=lambda index, value: progress.append((index, value)),
        )
    )

    assert outcome.ok
    assert outcome.dropped == 2
    assert len(outcome.urls) == 3
    assert [name for name, _ in relay_client.uploaded] == [
        "img0.jpg",
        "img1.jpg",
        "img2.jpg",
    ]
    assert progress[:2] == [(0, 50), (0, 100)]
    assert notifications.active()[-1].title == "3 images uploaded"


def test_upload_multiple_validates_whole_batch_first(
    upload_pipeline, relay_client
) -> None:
    files = [make_file("ok.jpg"), make_file("bad.bmp", "image/bmp")]

    outcome = asyncio.run(upload_pipeline.upload_multiple(files))

    assert outcome.error.kind is UploadErrorKind.UNSUPPORTED_TYPE
    assert outcome.urls == []
    assert relay_client.uploaded == []


def test_upload_multiple_stops_at_first_failure(upload_pipeline, relay_client) -> None:
    relay_client.failures["b.jpg"] = UploadError(
        UploadErrorKind.UPSTREAM_ERROR, "Failed to upload image"
    )
    files = [make_file("a.jpg"), make_file("b.jpg"), make_file("c.jpg")]

    outcome = asyncio.run(upload_pipeline.upload_multiple(files, "blog"))

    assert not outcome.ok
    assert outcome.urls == ["https://cdn.example.com/blog/a.jpg"]
    assert [name for name, _ in relay_client.uploaded] == ["a.jpg", "b.jpg"]
    assert outcome.tasks[1].state is UploadState.FAILED
    assert outcome.tasks[2].state is UploadState.VALIDATING


def test_add_to_gallery_appends_uploaded_urls(upload_pipeline) -> None:
    gallery = Gallery(max_files=4, images=["existing"])
    files = [make_file(f"g{i}.jpg") for i in range(5)]

    outcome = asyncio.run(upload_pipeline.add_to_gallery(gallery, files, "events"))

    assert outcome.dropped == 2
    assert gallery.images == [
        "existing",
        "https://cdn.example.com/events/g0.jpg",
        "https://cdn.example.com/events/g1.jpg",
        "https://cdn.example.com/events/g2.jpg",
    ]


def test_remove_from_gallery_is_idempotent(upload_pipeline, notifications) -> None:
    gallery = Gallery(images=["a", "b"])

    assert upload_pipeline.remove_from_gallery(gallery, "a") is True
    assert upload_pipeline.remove_from_gallery(gallery, "a") is False

    assert gallery.images == ["b"]
    titles = [n.title for n in notifications.active()]
    assert titles.count("Image removed from gallery") == 1


def test_new_gallery_uses_configured_capacity(relay_client, notifications) -> None:
    pipeline = UploadPipeline(
        relay=relay_client, notifications=notifications, gallery_max_files=2
    )

    gallery = pipeline.new_gallery(["a", "b", "c"])

    assert gallery.images == ["a", "b"]
    assert gallery.capacity_remaining == 0
