"""Dependency container wiring for the server and the client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from travel_admin.adapters.cloudinary_client import HttpxCloudinaryClient
from travel_admin.adapters.cookie_bridge_client import HttpxCookieBridgeClient
from travel_admin.adapters.dashboard_api_client import DashboardApiClient
from travel_admin.adapters.identity_client import HttpxIdentityClient
from travel_admin.adapters.session_store import JsonFileSessionStore
from travel_admin.adapters.upload_relay_client import HttpxUploadRelayClient
from travel_admin.config import Settings
from travel_admin.domain.uploads import UploadConstraints
from travel_admin.services.media_relay import MediaRelayService
from travel_admin.services.navigation import HistoryNavigator, Navigator
from travel_admin.services.notifications import NotificationCenter
from travel_admin.services.retry import RetryPolicy
from travel_admin.services.session_manager import SessionManager
from travel_admin.services.uploads import UploadPipeline


@dataclass
class AppContainer:
    """Holds dependencies of the dashboard server."""

    settings: Settings
    media_relay_service: MediaRelayService
    close_resources: Callable[[], Awaitable[None]]


@dataclass
class ClientContainer:
    """Holds dependencies of a dashboard client process."""

    settings: Settings
    session_manager: SessionManager
    upload_pipeline: UploadPipeline
    dashboard_api: DashboardApiClient
    notifications: NotificationCenter
    navigator: Navigator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default server container."""
    resolved_settings = settings or Settings()
    cloudinary_client = HttpxCloudinaryClient.create(
        cloud_name=resolved_settings.cloudinary_cloud_name,
        api_key=resolved_settings.cloudinary_api_key,
        api_secret=resolved_settings.cloudinary_api_secret,
    )
    media_relay_service = MediaRelayService(
        media_host=cloudinary_client,
        constraints=resolved_settings.upload_constraints(),
        retry_policy=RetryPolicy(
            max_attempts=resolved_settings.upload_retry_attempts,
            backoff_seconds=resolved_settings.upload_retry_backoff_seconds,
        ),
        default_folder=resolved_settings.upload_default_folder,
    )

    async def close_resources() -> None:
        await cloudinary_client.close()

    return AppContainer(
        settings=resolved_settings,
        media_relay_service=media_relay_service,
        close_resources=close_resources,
    )


def build_client_container(
    settings: Settings | None = None,
    constraints: UploadConstraints | None = None,
) -> ClientContainer:
    """Create the default client container talking to ``app_base_url``."""
    resolved_settings = settings or Settings()
    identity_client = HttpxIdentityClient.create(
        resolved_settings.identity_api_base_url
    )
    cookie_bridge = HttpxCookieBridgeClient.create(resolved_settings.app_base_url)
    relay_client = HttpxUploadRelayClient.create(resolved_settings.app_base_url)
    navigator = HistoryNavigator()
    notifications = NotificationCenter()
    session_manager = SessionManager(
        identity_client=identity_client,
        cookie_bridge=cookie_bridge,
        store=JsonFileSessionStore.create(resolved_settings.session_store_path),
        navigator=navigator,
    )
    upload_pipeline = UploadPipeline(
        relay=relay_client,
        notifications=notifications,
        constraints=constraints or resolved_settings.upload_constraints(),
        default_folder=resolved_settings.upload_default_folder,
        gallery_max_files=resolved_settings.gallery_max_files,
    )
    dashboard_api = DashboardApiClient.create(
        base_url=resolved_settings.identity_api_base_url,
        token_provider=lambda: session_manager.access_token,
        on_auth_failure=session_manager.expire,
        read_retry=RetryPolicy(
            max_attempts=resolved_settings.api_read_retry_attempts,
            backoff_seconds=resolved_settings.api_read_retry_backoff_seconds,
        ),
    )

    async def close_resources() -> None:
        await identity_client.close()
        await cookie_bridge.close()
        await relay_client.close()
        await dashboard_api.close()

    return ClientContainer(
        settings=resolved_settings,
        session_manager=session_manager,
        upload_pipeline=upload_pipeline,
        dashboard_api=dashboard_api,
        notifications=notifications,
        navigator=navigator,
        close_resources=close_resources,
    )
