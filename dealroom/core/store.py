"""In-memory session store: create and look up, never delete."""

from datetime import datetime, timedelta, timezone
from threading import Lock

from dealroom.core.errors import AlreadyExistsError, NotFoundError
from dealroom.core.models import Identity, Session, normalize_key


class SessionStore:
    """Sessions keyed by identity key (normalized email), in creation order.

    The store lives for the lifetime of the process. Sessions are mutated
    only through the references it hands out, under the caller's
    per-session lock.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._guard = Lock()

    def get_or_create(
        self,
        identity: Identity,
        *,
        persona_id: str,
        negotiation_window: timedelta,
        started_at: datetime | None = None,
    ) -> tuple[Session, bool]:
        """Return ``(session, created)``. An existing session is never reset."""
        with self._guard:
            existing = self._sessions.get(identity.key)
            if existing is not None:
                return existing, False

            session = Session(
                identity=identity,
                session_start=started_at or datetime.now(timezone.utc),
                negotiation_window=negotiation_window,
                persona_id=persona_id,
            )
            self._sessions[identity.key] = session
            return session, True

    def create(
        self,
        identity: Identity,
        *,
        persona_id: str,
        negotiation_window: timedelta,
        started_at: datetime | None = None,
        strict: bool = False,
    ) -> Session:
        session, created = self.get_or_create(
            identity,
            persona_id=persona_id,
            negotiation_window=negotiation_window,
            started_at=started_at,
        )
        if strict and not created:
            raise AlreadyExistsError(f"Session already exists for {identity.key}")
        return session

    def get(self, key: str) -> Session:
        session = self._sessions.get(normalize_key(key))
        if session is None:
            raise NotFoundError(f"No session for {key!r}")
        return session

    def list_sessions(self) -> list[Session]:
        with self._guard:
            return list(self._sessions.values())

    def __contains__(self, key: str) -> bool:
        return normalize_key(key) in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
