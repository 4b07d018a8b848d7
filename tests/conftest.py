"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from travel_admin.adapters.cloudinary_client import MediaHost
from travel_admin.adapters.cookie_bridge_client import CookieBridgeClient
from travel_admin.adapters.identity_client import IdentityClient
from travel_admin.adapters.session_store import SessionStore
from travel_admin.adapters.upload_relay_client import (
    ProgressCallback,
    UploadRelayClient,
)
from travel_admin.config import Settings
from travel_admin.containers import AppContainer
from travel_admin.domain.session import AuthGrant, Session, UserProfile
from travel_admin.domain.uploads import MediaAsset, MediaFile, UploadConstraints
from travel_admin.errors import NetworkError, ProtocolError, TravelAdminError
from travel_admin.services.media_relay import MediaRelayService
from travel_admin.services.navigation import HistoryNavigator
from travel_admin.services.notifications import NotificationCenter
from travel_admin.services.retry import RetryPolicy
from travel_admin.services.session_manager import SessionManager
from travel_admin.services.uploads import UploadPipeline


async def no_sleep(_seconds: float) -> None:
    return None


def make_user(email: str = "admin@example.com", **overrides: object) -> UserProfile:
    data: dict[str, object] = {
        "id": "user-1",
        "username": "admin",
        "email": email,
        "first_name": "Abebe",
        "last_name": "Bikila",
        "role": "admin",
        "email_verified": False,
    }
    data.update(overrides)
    return UserProfile.model_validate(data)


def make_grant(email: str = "admin@example.com") -> AuthGrant:
    return AuthGrant(
        access_token=f"access-{email}",
        refresh_token=f"refresh-{email}",
        user=make_user(email),
    )


def make_file(
    name: str = "photo.jpg",
    content_type: str = "image/jpeg",
    size: int = 1024,
) -> MediaFile:
    return MediaFile(filename=name, content_type=content_type, content=b"x" * size)


@dataclass
class FakeIdentityClient(IdentityClient):
    """Identity client returning canned grants and recording calls."""

    login_error: TravelAdminError | None = None
    register_error: TravelAdminError | None = None
    verify_error: TravelAdminError | None = None
    logout_error: Exception | None = None
    register_message: str | None = "Registration successful. Check your email."
    calls: list[tuple[str, object]] = field(default_factory=list)

    async def login(self, email: str, password: str) -> AuthGrant:
        self.calls.append(("login", email))
        if self.login_error:
            raise self.login_error
        return make_grant(email)

    async def register(self, payload: dict[str, str]) -> tuple[AuthGrant, str | None]:
        self.calls.append(("register", payload))
        if self.register_error:
            raise self.register_error
        return make_grant(payload["email"]), self.register_message

    async def verify_email(self, email: str, code: str) -> str | None:
        self.calls.append(("verify_email", (email, code)))
        if self.verify_error:
            raise self.verify_error
        return None

    async def logout(self, access_token: str, refresh_token: str) -> None:
        self.calls.append(("logout", (access_token, refresh_token)))
        if self.logout_error:
            raise self.logout_error


@dataclass
class FakeCookieBridgeClient(CookieBridgeClient):
    """Cookie bridge that keeps the cookie in memory."""

    cookie: str | None = None
    check_error: TravelAdminError | None = None
    set_error: TravelAdminError | None = None
    clear_error: Exception | None = None
    invisible_checks: int = 0
    calls: list[str] = field(default_factory=list)

    async def is_authenticated(self) -> bool:
        self.calls.append("check")
        if self.check_error:
            raise self.check_error
        if self.invisible_checks:
            self.invisible_checks -= 1
            return False
        return self.cookie is not None

    async def set_cookie(self, token: str) -> None:
        self.calls.append("set")
        if self.set_error:
            raise self.set_error
        self.cookie = token

    async def clear_cookie(self) -> None:
        self.calls.append("clear")
        if self.clear_error:
            raise self.clear_error
        self.cookie = None


@dataclass
class InMemorySessionStore(SessionStore):
    """Session store kept in memory for tests."""

    session: Session | None = None
    pending_verification: str | None = None
    corrupt: bool = False

    def load(self) -> Session | None:
        if self.corrupt:
            raise ProtocolError("Stored session is unreadable")
        return self.session

    def save(self, session: Session) -> None:
        self.session = session

    def clear(self) -> None:
        self.session = None
        self.pending_verification = None
        self.corrupt = False

    def get_pending_verification(self) -> str | None:
        return self.pending_verification

    def set_pending_verification(self, email: str) -> None:
        self.pending_verification = email

    def clear_pending_verification(self) -> None:
        self.pending_verification = None


@dataclass
class FakeUploadRelayClient(UploadRelayClient):
    """Relay client that succeeds unless told to fail for a filename."""

    failures: dict[str, TravelAdminError] = field(default_factory=dict)
    progress_steps: tuple[int | None, ...] = (50, 100)
    uploaded: list[tuple[str, str]] = field(default_factory=list)

    async def upload(
        self,
        file: MediaFile,
        folder: str,
        on_progress: ProgressCallback | None = None,
    ) -> MediaAsset:
        self.uploaded.append((file.filename, folder))
        if file.filename in self.failures:
            raise self.failures[file.filename]
        if on_progress is not None:
            for step in self.progress_steps:
                on_progress(step)
        return MediaAsset(
            url=f"https://cdn.example.com/{folder}/{file.filename}",
            public_id=f"{folder}/{file.filename}",
        )


@dataclass
class FakeMediaHost(MediaHost):
    """Media host that fails a configured number of times before succeeding."""

    failures_before_success: int = 0
    error: Exception = field(
        default_factory=lambda: NetworkError("Media host unreachable")
    )
    calls: list[tuple[str, str, str]] = field(default_factory=list)

    async def upload_image(
        self, file: MediaFile, folder: str, public_id: str
    ) -> MediaAsset:
        self.calls.append((file.filename, folder, public_id))
        if self.failures_before_success > 0:
            self.failures_before_success -= 1
            raise self.error
        return MediaAsset(
            url=f"https://res.cloudinary.com/demo/{folder}/{public_id}.jpg",
            public_id=f"{folder}/{public_id}",
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        cloudinary_cloud_name="demo",
        cloudinary_api_key="cloud-key",
        cloudinary_api_secret="cloud-secret",
        environment="test",
    )


@pytest.fixture
def identity_client() -> FakeIdentityClient:
    return FakeIdentityClient()


@pytest.fixture
def cookie_bridge() -> FakeCookieBridgeClient:
    return FakeCookieBridgeClient()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def navigator() -> HistoryNavigator:
    return HistoryNavigator()


@pytest.fixture
def session_manager(
    identity_client: FakeIdentityClient,
    cookie_bridge: FakeCookieBridgeClient,
    session_store: InMemorySessionStore,
    navigator: HistoryNavigator,
) -> SessionManager:
    return SessionManager(
        identity_client=identity_client,
        cookie_bridge=cookie_bridge,
        store=session_store,
        navigator=navigator,
        cookie_confirm_policy=RetryPolicy(max_attempts=3, backoff_seconds=0),
        sleep=no_sleep,
    )


@pytest.fixture
def relay_client() -> FakeUploadRelayClient:
    return FakeUploadRelayClient()


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def upload_pipeline(
    relay_client: FakeUploadRelayClient, notifications: NotificationCenter
) -> UploadPipeline:
    return UploadPipeline(
        relay=relay_client,
        notifications=notifications,
        constraints=UploadConstraints(),
    )


@pytest.fixture
def media_host() -> FakeMediaHost:
    return FakeMediaHost()


@pytest.fixture
def container(settings: Settings, media_host: FakeMediaHost) -> AppContainer:
    media_relay_service = MediaRelayService(
        media_host=media_host,
        constraints=settings.upload_constraints(),
        retry_policy=RetryPolicy(max_attempts=3, backoff_seconds=1.0),
        default_folder=settings.upload_default_folder,
        sleep=no_sleep,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        media_relay_service=media_relay_service,
        close_resources=close_resources,
    )
