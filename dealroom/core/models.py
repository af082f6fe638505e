"""In-memory domain model for negotiation sessions."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class Speaker(str, Enum):
    USER = "user"
    COUNTERPART = "counterpart"
    SYSTEM = "system"

    @property
    def opposite(self) -> "Speaker":
        if self is Speaker.USER:
            return Speaker.COUNTERPART
        if self is Speaker.COUNTERPART:
            return Speaker.USER
        raise ValueError("system messages have no opposite speaker")


class Phase(str, Enum):
    NEGOTIATING = "negotiating"
    FEEDBACK_PENDING = "feedback_pending"
    CLOSED = "closed"

    @property
    def rank(self) -> int:
        return _PHASE_ORDER.index(self)


_PHASE_ORDER = [Phase.NEGOTIATING, Phase.FEEDBACK_PENDING, Phase.CLOSED]


@dataclass(frozen=True)
class Identity:
    name: str
    email: str

    @property
    def key(self) -> str:
        return normalize_key(self.email)


def normalize_key(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class Turn:
    speaker: Speaker
    text: str
    timestamp: datetime


@dataclass
class OfferLedger:
    first_offer: float | None = None
    first_offer_by: Speaker | None = None
    first_offer_at: datetime | None = None
    counter_offer: float | None = None
    counter_offer_at: datetime | None = None

    def record_first_offer(self, value: float, by: Speaker, at: datetime) -> bool:
        """Set the first offer once. Returns False if it was already set."""
        if self.first_offer is not None:
            return False
        self.first_offer = value
        self.first_offer_by = by
        self.first_offer_at = at
        return True

    def record_counter_offer(self, value: float, by: Speaker, at: datetime) -> bool:
        """Set the counteroffer once, only from the side opposite the first offer."""
        if self.first_offer is None or self.counter_offer is not None:
            return False
        if by is not self.first_offer_by.opposite:
            return False
        self.counter_offer = value
        self.counter_offer_at = at
        return True


@dataclass
class Agreement:
    reached: bool = False
    terms: str | float | None = None
    at: datetime | None = None


@dataclass
class Session:
    identity: Identity
    session_start: datetime
    negotiation_window: timedelta
    persona_id: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    history: list[Turn] = field(default_factory=list)
    offers: OfferLedger = field(default_factory=OfferLedger)
    agreement: Agreement = field(default_factory=Agreement)
    phase: Phase = Phase.NEGOTIATING

    @property
    def key(self) -> str:
        return self.identity.key

    @property
    def deadline(self) -> datetime:
        return self.session_start + self.negotiation_window

    def elapsed(self, now: datetime) -> timedelta:
        return now - self.session_start

    def append(self, speaker: Speaker, text: str, at: datetime) -> Turn:
        turn = Turn(speaker=speaker, text=text, timestamp=at)
        self.history.append(turn)
        return turn

    def advance_phase(self, phase: Phase) -> bool:
        """Move forward in the phase order. Returns True if the phase changed."""
        if phase.rank < self.phase.rank:
            raise ValueError(f"cannot move session from {self.phase.value} to {phase.value}")
        changed = phase is not self.phase
        self.phase = phase
        return changed

    def reach_agreement(self, terms: str | float, at: datetime) -> bool:
        """Flip the agreement flag once and leave the negotiating phase."""
        if self.agreement.reached:
            return False
        self.agreement = Agreement(reached=True, terms=terms, at=at)
        self.advance_phase(Phase.FEEDBACK_PENDING)
        return True
