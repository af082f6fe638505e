"""Summary aggregation: elapsed-time metrics per session."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from dealroom.core.models import Phase, Session, Speaker
from dealroom.core.store import SessionStore


@dataclass(frozen=True)
class SummaryRecord:
    name: str
    email: str
    phase: Phase
    session_start: datetime
    turn_count: int
    first_offer: float | None
    first_offer_by: Speaker | None
    counter_offer: float | None
    agreement_reached: bool
    agreement_terms: str | float | None
    time_to_counter: timedelta | None
    time_to_agreement: timedelta | None


def _delta(start: datetime | None, end: datetime | None) -> timedelta | None:
    if start is None or end is None:
        return None
    return end - start


def summarize(session: Session) -> SummaryRecord:
    """Build a read-only summary. Safe at any phase; unknown fields are None."""
    offers = session.offers
    agreement = session.agreement
    return SummaryRecord(
        name=session.identity.name,
        email=session.identity.email,
        phase=session.phase,
        session_start=session.session_start,
        turn_count=len(session.history),
        first_offer=offers.first_offer,
        first_offer_by=offers.first_offer_by,
        counter_offer=offers.counter_offer,
        agreement_reached=agreement.reached,
        agreement_terms=agreement.terms,
        time_to_counter=_delta(offers.first_offer_at, offers.counter_offer_at),
        time_to_agreement=_delta(offers.first_offer_at, agreement.at),
    )


def summarize_all(store: SessionStore) -> list[SummaryRecord]:
    """Summaries for every session, in creation order."""
    return [summarize(session) for session in store.list_sessions()]
