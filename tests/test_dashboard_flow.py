"""End-to-end flows between the client services and the dashboard server."""

import asyncio

import httpx

from travel_admin.adapters.cookie_bridge_client import HttpxCookieBridgeClient
from travel_admin.adapters.upload_relay_client import HttpxUploadRelayClient
from travel_admin.api.app import create_app
from travel_admin.domain.uploads import Gallery, UploadConstraints, UploadErrorKind
from travel_admin.services.navigation import HistoryNavigator
from travel_admin.services.notifications import NotificationCenter
from travel_admin.services.session_manager import SessionManager
from travel_admin.services.uploads import UploadPipeline
from tests.conftest import (
    FakeIdentityClient,
    InMemorySessionStore,
    make_file,
    no_sleep,
)


def _http_client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


def _manager(http_client: httpx.AsyncClient, store: InMemorySessionStore):
    return SessionManager(
        identity_client=FakeIdentityClient(),
        cookie_bridge=HttpxCookieBridgeClient(http_client=http_client),
        store=store,
        navigator=HistoryNavigator(),
        sleep=no_sleep,
    )


def test_login_unlocks_dashboard_and_logout_locks_it(container) -> None:
    app = create_app(container)
    store = InMemorySessionStore()

    async def scenario():
        async with _http_client(app) as http_client:
            manager = _manager(http_client, store)
            before = await http_client.get("/dashboard")
            result = await manager.login("admin@example.com", "pw")
            unlocked = await http_client.get("/dashboard")
            await manager.logout()
            locked = await http_client.get("/dashboard")
            return before, result, unlocked, locked

    before, result, unlocked, locked = asyncio.run(scenario())

    assert before.status_code == 307
    assert result.success is True
    assert unlocked.status_code == 200
    assert locked.status_code == 307
    assert locked.headers["location"] == "http://testserver/login"
    assert store.session is None


def test_bootstrap_reissues_cookie_from_store(container) -> None:
    app = create_app(container)
    store = InMemorySessionStore()

    async def scenario():
        async with _http_client(app) as first_client:
            await _manager(first_client, store).login("admin@example.com", "pw")
        async with _http_client(app) as fresh_client:
            manager = _manager(fresh_client, store)
            state = await manager.bootstrap()
            status = await fresh_client.get("/api/auth")
            return state, status.json()

    state, status = asyncio.run(scenario())

    assert state.is_authenticated is True
    assert state.session.user.email == "admin@example.com"
    assert status == {"isAuthenticated": True}


def test_gallery_upload_through_relay(container, media_host) -> None:
    app = create_app(container)
    gallery = Gallery(max_files=2)
    files = [make_file("a.jpg"), make_file("b.png", "image/png"), make_file("c.jpg")]

    async def scenario():
        async with _http_client(app) as http_client:
            pipeline = UploadPipeline(
                relay=HttpxUploadRelayClient(http_client=http_client),
                notifications=NotificationCenter(),
                constraints=UploadConstraints(),
            )
            return await pipeline.add_to_gallery(gallery, files, "destinations")

    outcome = asyncio.run(scenario())

    assert outcome.ok
    assert outcome.dropped == 1
    assert len(gallery.images) == 2
    assert all("/destinations/" in url for url in gallery.images)
    assert [call[1] for call in media_host.calls] == ["destinations", "destinations"]


def test_relay_failure_reaches_client_as_upstream_error(container, media_host) -> None:
    media_host.failures_before_success = 10
    app = create_app(container)

    async def scenario():
        async with _http_client(app) as http_client:
            pipeline = UploadPipeline(
                relay=HttpxUploadRelayClient(http_client=http_client),
                notifications=NotificationCenter(),
            )
            return await pipeline.upload_single(make_file())

    outcome = asyncio.run(scenario())

    assert not outcome.ok
    assert outcome.error.kind is UploadErrorKind.UPSTREAM_ERROR
    assert outcome.error.message == "Failed to upload image"
