"""Client-side owner of the authenticated session."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from travel_admin.adapters.cookie_bridge_client import CookieBridgeClient
from travel_admin.adapters.identity_client import IdentityClient
from travel_admin.adapters.session_store import SessionStore
from travel_admin.domain.forms import (
    LOGIN_RULES,
    REGISTRATION_RULES,
    VERIFY_EMAIL_RULES,
    FieldRule,
    LoginForm,
    RegistrationForm,
    VerifyEmailForm,
    ensure_valid,
)
from travel_admin.domain.session import (
    AuthGrant,
    AuthResult,
    Session,
    SessionState,
    UserProfile,
)
from travel_admin.errors import (
    AuthError,
    ProtocolError,
    TravelAdminError,
    UpstreamError,
    ValidationError,
)
from travel_admin.services.navigation import Navigator
from travel_admin.services.retry import RetryPolicy, Sleep, attempt_with_retry
from travel_admin.services.route_guard import LOGIN_PATH

_logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionState], None]

_BUSY_MESSAGE = "Another authentication request is in progress"


class _CookieNotVisibleError(RuntimeError):
    pass


@dataclass
class SessionManager:
    """Single source of truth for who is signed in.

    Operations serialize themselves: while one of login, register or
    verify_email is in flight, another returns a failed result instead of
    touching the session. Logout is always allowed to run.
    """

    identity_client: IdentityClient
    cookie_bridge: CookieBridgeClient
    store: SessionStore
    navigator: Navigator
    cookie_confirm_policy: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(max_attempts=3, backoff_seconds=0.2)
    )
    sleep: Sleep = field(default=asyncio.sleep)
    _state: SessionState = field(
        default_factory=lambda: SessionState(Session(), is_authenticated=False),
        init=False,
    )
    _listeners: list[SessionListener] = field(default_factory=list, init=False)
    _busy: bool = field(default=False, init=False)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session:
        return self._state.session

    @property
    def user(self) -> UserProfile | None:
        return self._state.session.user

    @property
    def access_token(self) -> str | None:
        return self._state.session.access_token

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def bootstrap(self) -> SessionState:
        """Reconcile the session cookie with the locally stored session."""
        async with self._operation(exclusive=False):
            try:
                cookie_present = await self.cookie_bridge.is_authenticated()
            except TravelAdminError:
                _logger.exception("Auth check failed; falling back to stored session")
                cookie_present = False
            stored = self._load_stored()
            if cookie_present:
                if stored is not None and stored.user is not None:
                    self._set(stored, authenticated=True)
                else:
                    _logger.info("Session cookie present but no stored profile")
                    self._set(Session(), authenticated=True)
            elif stored is not None and stored.access_token and stored.user:
                _logger.info("Re-issuing session cookie from stored token")
                await self._mirror_cookie(stored.access_token)
                self._set(stored, authenticated=True)
            else:
                self._set(Session(), authenticated=False)
        return self._state

    async def login(self, email: str, password: str) -> AuthResult:
        """Sign in against the identity API and persist the session."""
        form = LoginForm(email=email.strip(), password=password)
        rejected = _check(form, LOGIN_RULES)
        if rejected is not None:
            return rejected
        if self._busy:
            return AuthResult(success=False, message=_BUSY_MESSAGE)
        async with self._operation():
            _logger.info("Attempting login for %s", form.email)
            try:
                grant = await self.identity_client.login(form.email, form.password)
            except TravelAdminError as exc:
                return _failure("Login", exc, "An error occurred during login")
            if not self._persist_grant(grant):
                return AuthResult(False, "An error occurred during login")
            await self._mirror_cookie(grant.access_token)
            self._set(grant.to_session(), authenticated=True)
        return AuthResult(success=True, message="Login successful")

    async def register(self, form: RegistrationForm) -> AuthResult:
        """Create an account, persist its session and mark it pending verification."""
        rejected = _check(form, REGISTRATION_RULES)
        if rejected is not None:
            return rejected
        if self._busy:
            return AuthResult(success=False, message=_BUSY_MESSAGE)
        async with self._operation():
            try:
                grant, message = await self.identity_client.register(form.to_payload())
            except TravelAdminError as exc:
                return _failure(
                    "Registration", exc, "An error occurred during registration"
                )
            if not self._persist_grant(grant):
                return AuthResult(False, "An error occurred during registration")
            try:
                self.store.set_pending_verification(grant.user.email)
            except OSError:
                _logger.exception("Failed to store pending verification marker")
            await self._mirror_cookie(grant.access_token)
            self._set(grant.to_session(), authenticated=True)
        return AuthResult(success=True, message=message or "Registration successful")

    async def verify_email(self, email: str, code: str) -> AuthResult:
        """Confirm an email address and mark the matching profile verified."""
        form = VerifyEmailForm(email=email.strip(), code=code.strip())
        rejected = _check(form, VERIFY_EMAIL_RULES)
        if rejected is not None:
            return rejected
        if self._busy:
            return AuthResult(success=False, message=_BUSY_MESSAGE)
        async with self._operation():
            try:
                message = await self.identity_client.verify_email(form.email, form.code)
            except TravelAdminError as exc:
                return _failure(
                    "Verification", exc, "An error occurred during email verification"
                )
            user = self.user
            if user is not None and _same_email(user.email, form.email):
                verified = self.session.model_copy(
                    update={"user": user.model_copy(update={"email_verified": True})}
                )
                self._set(verified, authenticated=self.is_authenticated)
                self._save(verified)
            self._clear_pending_for(form.email)
        return AuthResult(
            success=True, message=message or "Email verification successful"
        )

    async def update_tokens(self, access_token: str, refresh_token: str) -> None:
        """Store refreshed tokens and re-mirror the cookie."""
        refreshed = self.session.model_copy(
            update={"access_token": access_token, "refresh_token": refresh_token}
        )
        self._save(refreshed)
        await self._mirror_cookie(access_token)
        self._set(refreshed, authenticated=True)
        self._publish()

    async def logout(self) -> None:
        """Sign out remotely when possible and always clear local state."""
        async with self._operation(exclusive=False):
            try:
                await self._remote_logout()
                try:
                    await self.cookie_bridge.clear_cookie()
                except Exception:
                    _logger.exception("Failed to clear auth cookie")
            finally:
                self._teardown_local()
        self.navigator.navigate(LOGIN_PATH)

    async def expire(self) -> None:
        """Drop a session the API no longer accepts, without a remote logout."""
        _logger.warning("Session rejected by the API; signing out locally")
        try:
            await self.cookie_bridge.clear_cookie()
        except Exception:
            _logger.exception("Failed to clear auth cookie")
        self._teardown_local()
        self._publish()
        self.navigator.navigate(LOGIN_PATH)

    @asynccontextmanager
    async def _operation(self, exclusive: bool = True) -> AsyncIterator[None]:
        if exclusive:
            self._busy = True
        self._state = SessionState(
            self._state.session, self._state.is_authenticated, is_loading=True
        )
        self._publish()
        try:
            yield
        finally:
            if exclusive:
                self._busy = False
            self._state = SessionState(
                self._state.session, self._state.is_authenticated, is_loading=False
            )
            self._publish()

    def _set(self, session: Session, authenticated: bool) -> None:
        self._state = SessionState(
            session, authenticated, is_loading=self._state.is_loading
        )

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                _logger.exception("Session listener failed")

    def _load_stored(self) -> Session | None:
        try:
            return self.store.load()
        except ProtocolError:
            _logger.exception("Discarding unreadable stored session")
            self.store.clear()
            return None

    def _save(self, session: Session) -> bool:
        try:
            self.store.save(session)
        except OSError:
            _logger.exception("Failed to persist session")
            return False
        return True

    def _persist_grant(self, grant: AuthGrant) -> bool:
        if self._save(grant.to_session()):
            return True
        self._clear_store()
        return False

    def _clear_pending_for(self, email: str) -> None:
        try:
            pending = self.store.get_pending_verification()
            if pending is not None and _same_email(pending, email):
                self.store.clear_pending_verification()
        except (OSError, ProtocolError):
            _logger.exception("Failed to clear pending verification marker")

    def _clear_store(self) -> None:
        try:
            self.store.clear()
        except OSError:
            _logger.exception("Failed to clear stored session")

    def _teardown_local(self) -> None:
        self._clear_store()
        self._set(Session(), authenticated=False)

    async def _remote_logout(self) -> None:
        session = self.session
        if not (session.access_token and session.refresh_token):
            try:
                stored = self.store.load()
            except Exception:
                _logger.exception("Could not read stored session for logout")
                stored = None
            if stored is not None:
                session = stored
        if not (session.access_token and session.refresh_token):
            _logger.warning("No refresh or access token available for remote logout")
            return
        try:
            await self.identity_client.logout(
                session.access_token, session.refresh_token
            )
        except Exception:
            _logger.exception("Remote logout failed")
        else:
            _logger.info("Remote logout succeeded")

    async def _mirror_cookie(self, token: str) -> bool:
        """Set the session cookie and confirm the server can see it."""
        try:
            await self.cookie_bridge.set_cookie(token)
        except TravelAdminError:
            _logger.exception("Failed to set auth cookie")
            return False

        async def confirm() -> None:
            if not await self.cookie_bridge.is_authenticated():
                raise _CookieNotVisibleError("Auth cookie not yet visible")

        try:
            await attempt_with_retry(
                confirm,
                self.cookie_confirm_policy,
                retry_on=(_CookieNotVisibleError, TravelAdminError),
                sleep=self.sleep,
                description="Auth cookie confirmation",
            )
        except (_CookieNotVisibleError, TravelAdminError):
            _logger.warning("Auth cookie was set but never became visible")
            return False
        return True


def _check(form: object, rules: tuple[FieldRule, ...]) -> AuthResult | None:
    try:
        ensure_valid(form, rules)
    except ValidationError as exc:
        _logger.info("%s rejected locally: %s", type(form).__name__, exc.fields)
        return AuthResult(success=False, message=exc.message)
    return None


def _failure(action: str, exc: TravelAdminError, generic: str) -> AuthResult:
    """Convert an adapter error into a failed result with a user-facing message."""
    if isinstance(exc, AuthError | UpstreamError):
        _logger.warning("%s rejected: %s", action, exc)
        return AuthResult(success=False, message=exc.message)
    _logger.error("%s error: %s", action, exc, exc_info=exc)
    return AuthResult(success=False, message=generic)


def _same_email(left: str, right: str) -> bool:
    return left.strip().casefold() == right.strip().casefold()
