"""Local persisted storage for the client session."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from travel_admin.domain.session import Session
from travel_admin.errors import ProtocolError


class SessionStore(Protocol):
    """Persistence interface for the client-side session copy."""

    def load(self) -> Session | None:
        """Return the persisted session, if any."""

    def save(self, session: Session) -> None:
        """Persist the session."""

    def clear(self) -> None:
        """Remove the session and any pending-verification marker."""

    def get_pending_verification(self) -> str | None:
        """Return the email awaiting verification, if any."""

    def set_pending_verification(self, email: str) -> None:
        """Remember an email awaiting verification."""

    def clear_pending_verification(self) -> None:
        """Forget the pending-verification marker."""


class _StoredState(BaseModel):
    session: Session | None = None
    pending_verification: str | None = None


@dataclass
class JsonFileSessionStore(SessionStore):
    """Session store backed by a single JSON document on disk."""

    path: Path

    @classmethod
    def create(cls, path: str) -> "JsonFileSessionStore":
        return cls(path=Path(path).expanduser())

    def load(self) -> Session | None:
        return self._read().session

    def save(self, session: Session) -> None:
        state = self._read_or_empty()
        self._write(state.model_copy(update={"session": session}))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def get_pending_verification(self) -> str | None:
        return self._read().pending_verification

    def set_pending_verification(self, email: str) -> None:
        state = self._read_or_empty()
        self._write(state.model_copy(update={"pending_verification": email}))

    def clear_pending_verification(self) -> None:
        state = self._read_or_empty()
        if state.pending_verification is None:
            return
        self._write(state.model_copy(update={"pending_verification": None}))

    def _read(self) -> _StoredState:
        if not self.path.exists():
            return _StoredState()
        try:
            return _StoredState.model_validate_json(self.path.read_text("utf-8"))
        except (PydanticValidationError, UnicodeDecodeError) as exc:
            raise ProtocolError(
                "Stored session is unreadable", detail=str(self.path)
            ) from exc

    def _read_or_empty(self) -> _StoredState:
        try:
            return self._read()
        except ProtocolError:
            return _StoredState()

    def _write(self, state: _StoredState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(state.model_dump_json(), "utf-8")
        tmp_path.replace(self.path)
