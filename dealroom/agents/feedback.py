"""Post-negotiation feedback.

Feedback is composed from two evaluators, one for negotiating style and one
for the outcome. Both are plain callables ``(session, persona) -> str`` so a
model-backed evaluator can replace the defaults without touching the engine.
"""

from typing import Callable

from dealroom.core.models import Session, Speaker
from dealroom.core.registry import PersonaConfig

Evaluator = Callable[[Session, PersonaConfig], str]

FEEDBACK_HEADER = "The negotiation is over. Here is your feedback."
FEEDBACK_FOOTER = "You can keep asking questions about the negotiation here."


def _money(value: float) -> str:
    return f"${value:,.0f}"


def evaluate_style(session: Session, persona: PersonaConfig) -> str:
    user_turns = [t for t in session.history if t.speaker is Speaker.USER]
    if not user_turns:
        return "Style: you did not send any messages."

    avg_words = sum(len(t.text.split()) for t in user_turns) / len(user_turns)
    notes = [f"you sent {len(user_turns)} messages averaging {avg_words:.0f} words"]

    offers = session.offers
    if offers.first_offer_by is Speaker.USER:
        notes.append(f"you anchored first at {_money(offers.first_offer)}")
    elif offers.first_offer_by is Speaker.COUNTERPART:
        notes.append("you let the seller anchor first")
    else:
        notes.append("no price was put on the table")

    if offers.counter_offer is not None and offers.first_offer_by is Speaker.COUNTERPART:
        notes.append(f"you countered at {_money(offers.counter_offer)}")

    return "Style: " + "; ".join(notes) + "."


def evaluate_agreement(session: Session, persona: PersonaConfig) -> str:
    agreement = session.agreement
    if not agreement.reached:
        return "Outcome: no agreement was reached."

    numeric = isinstance(agreement.terms, (int, float))
    terms = _money(agreement.terms) if numeric else f'"{agreement.terms}"'
    parts = [f"Outcome: agreement reached on {terms}"]

    if numeric and persona.asking_price:
        share = agreement.terms / persona.asking_price * 100
        parts.append(f"{share:.1f}% of the {_money(persona.asking_price)} asking price")

    if session.offers.first_offer_at is not None and agreement.at is not None:
        minutes = (agreement.at - session.offers.first_offer_at).total_seconds() / 60
        parts.append(f"{minutes:.1f} minutes after the first offer")

    return ", ".join(parts) + "."


def compose_feedback(
    session: Session,
    persona: PersonaConfig,
    style_evaluator: Evaluator = evaluate_style,
    agreement_evaluator: Evaluator = evaluate_agreement,
) -> str:
    return "\n\n".join(
        [
            FEEDBACK_HEADER,
            style_evaluator(session, persona),
            agreement_evaluator(session, persona),
            FEEDBACK_FOOTER,
        ]
    )
