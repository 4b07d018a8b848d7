"""Domain models for the authenticated session."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

SESSION_COOKIE_NAME = "accessToken"


class UserProfile(BaseModel):
    """Profile of the signed-in user as returned by the identity API."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | int | None = None
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str | None = None
    status: str | None = None
    email_verified: bool | None = None


class Session(BaseModel):
    """Tokens and profile for the current client."""

    model_config = ConfigDict(frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    user: UserProfile | None = None

    @property
    def is_empty(self) -> bool:
        return self.access_token is None and self.user is None


class AuthGrant(BaseModel):
    """Tokens and profile issued by a successful login or registration."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    user: UserProfile

    def to_session(self) -> Session:
        return Session(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            user=self.user,
        )


@dataclass(frozen=True)
class SessionState:
    """Snapshot published to session subscribers."""

    session: Session
    is_authenticated: bool
    is_loading: bool = False


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a session operation with a user-facing message."""

    success: bool
    message: str
