"""Transient, dismissible user notifications."""

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

DEFAULT_TTL_SECONDS = 5


class NotificationVariant(StrEnum):
    DEFAULT = "default"
    SUCCESS = "success"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    """A short message shown to the user."""

    id: str
    title: str
    description: str | None
    variant: NotificationVariant
    expires_at: datetime


@dataclass
class NotificationCenter:
    """In-memory notification queue with automatic expiry."""

    _entries: dict[str, Notification]
    ttl_seconds: int

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._entries = {}
        self.ttl_seconds = ttl_seconds

    def notify(
        self,
        title: str,
        description: str | None = None,
        variant: NotificationVariant = NotificationVariant.DEFAULT,
    ) -> Notification:
        """Queue a notification and return it."""
        notification = Notification(
            id=secrets.token_hex(4),
            title=title,
            description=description,
            variant=variant,
            expires_at=datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds),
        )
        self._entries[notification.id] = notification
        return notification

    def dismiss(self, notification_id: str) -> None:
        self._entries.pop(notification_id, None)

    def active(self) -> list[Notification]:
        """Return notifications that have not expired, oldest first."""
        now = datetime.now(tz=UTC)
        for key in [k for k, v in self._entries.items() if v.expires_at <= now]:
            self._entries.pop(key, None)
        return list(self._entries.values())
