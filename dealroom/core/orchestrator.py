"""Orchestrator: the service facade between a transport and the turn engine."""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Iterator

import structlog

from dealroom.agents.feedback import Evaluator, evaluate_agreement, evaluate_style
from dealroom.agents.generator import DialogueGenerator, OpenAIDialogueGenerator
from dealroom.agents.negotiator import NegotiationStateMachine
from dealroom.core.access import AccessValidator, CodeSetValidator
from dealroom.core.config import Settings
from dealroom.core.errors import BusyError, InvalidArgumentError, UnauthorizedError
from dealroom.core.models import Identity, Phase, Turn, normalize_key
from dealroom.core.registry import PersonaRegistry
from dealroom.core.store import SessionStore
from dealroom.core.summary import SummaryRecord, summarize_all

log = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionHandle:
    session_key: str
    session_id: str
    resumed: bool


class Orchestrator:
    """Manages the session lifecycle and serializes turns per session.

    Turns for different sessions run in parallel. A second turn for a
    session that already has one in flight is rejected with BusyError.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        generator: DialogueGenerator | None = None,
        registry: PersonaRegistry | None = None,
        access_validator: AccessValidator | None = None,
        settings: Settings | None = None,
        clock: Clock = utc_now,
        style_evaluator: Evaluator = evaluate_style,
        agreement_evaluator: Evaluator = evaluate_agreement,
    ):
        self.settings = settings or Settings.from_env()
        self.store = store or SessionStore()
        self.registry = registry or PersonaRegistry(self.settings)
        self.access_validator = access_validator or CodeSetValidator(self.settings.access_codes)
        self.clock = clock

        if generator is None:
            generator = OpenAIDialogueGenerator(
                model=self.settings.openai_model,
                timeout=self.settings.generation_timeout,
            )
        self.engine = NegotiationStateMachine(
            generator,
            style_evaluator=style_evaluator,
            agreement_evaluator=agreement_evaluator,
        )

        self._locks: dict[str, Lock] = {}
        self._locks_guard = Lock()

    def start_session(
        self, name: str, email: str, access_code: str, persona_id: str = "seller"
    ) -> SessionHandle:
        """Start a new session, or return the existing one for this email."""
        if not (name or "").strip() or not (email or "").strip():
            raise InvalidArgumentError("Missing name or email")
        if "@" not in email:
            raise InvalidArgumentError(f"Malformed email: {email!r}")

        if not self.access_validator(access_code or ""):
            log.warning("access_denied", email=normalize_key(email))
            raise UnauthorizedError("Invalid access code")

        persona = self.registry.get(persona_id)
        if persona is None:
            raise InvalidArgumentError(f"Persona '{persona_id}' not found in registry")

        identity = Identity(name=name.strip(), email=email.strip())
        session, created = self.store.get_or_create(
            identity,
            persona_id=persona.persona_id,
            negotiation_window=persona.negotiation_window,
            started_at=self.clock(),
        )

        if created:
            log.info(
                "session_created",
                session_key=session.key,
                persona_id=persona.persona_id,
                deadline=session.deadline.isoformat(),
            )
        else:
            log.info("session_resumed", session_key=session.key, phase=session.phase.value)

        return SessionHandle(session_key=session.key, session_id=session.session_id, resumed=not created)

    def submit_turn(self, session_key: str, message: str, now: datetime | None = None) -> str:
        """Process one user message and return the reply text.

        ``now`` overrides the clock and must be timezone-aware.
        """
        if not (message or "").strip():
            raise InvalidArgumentError("Message is empty")
        if now is not None and now.tzinfo is None:
            raise InvalidArgumentError("Turn time must be timezone-aware")

        session = self.store.get(session_key)
        persona = self.registry.get(session.persona_id)

        with self._session_lock(session.key):
            turn_time = now or self.clock()
            log.info("turn_received", session_key=session.key, phase=session.phase.value)
            return self.engine.run_turn(session, persona, message.strip(), turn_time)

    def close_session(self, session_key: str) -> None:
        """Explicitly close a session whose negotiation has ended."""
        session = self.store.get(session_key)
        with self._session_lock(session.key):
            if session.phase is Phase.NEGOTIATING:
                raise InvalidArgumentError("Cannot close a session that is still negotiating")
            session.advance_phase(Phase.CLOSED)
            log.info("session_closed", session_key=session.key)

    def get_summaries(self) -> list[SummaryRecord]:
        return summarize_all(self.store)

    def get_transcript(self, session_key: str) -> list[Turn]:
        return list(self.store.get(session_key).history)

    @contextmanager
    def _session_lock(self, key: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(key, Lock())

        if not lock.acquire(blocking=False):
            log.warning("turn_rejected_busy", session_key=key)
            raise BusyError(f"A turn for {key!r} is already in progress")
        try:
            yield
        finally:
            lock.release()
