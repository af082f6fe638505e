"""LangGraph graph for one negotiation turn.

Each turn runs through a small graph whose nodes mutate the ``Session``
carried in the state:

    START -> closed | answer_question | check_deadline
    check_deadline -> expire | concede | generate
    generate -> detect_offers -> detect_agreement -> feedback | END

The dialogue generator is called only from ``generate`` and
``answer_question``. The offer ledger and agreement are only touched after a
successful generation (or by the deadline rules, which never generate).
"""

from datetime import datetime

import structlog
from langgraph.graph import END, START, StateGraph

from dealroom.agents.feedback import Evaluator, compose_feedback, evaluate_agreement, evaluate_style
from dealroom.agents.generator import DialogueGenerator, build_history
from dealroom.agents.state import TurnState
from dealroom.core.errors import UpstreamError
from dealroom.core.models import Phase, Session, Speaker
from dealroom.core.registry import PersonaConfig
from dealroom.tools import detects_agreement, extract_offer

log = structlog.get_logger(__name__)

FALLBACK_MESSAGE = (
    "Sorry, I'm temporarily unable to respond. Please send your message again in a moment."
)
TIME_EXPIRED_MESSAGE = (
    "Time is up. The negotiation window has closed and no deal was reached. "
    "You can now ask questions about the negotiation."
)
CLOSED_MESSAGE = "This session is closed. Thank you for taking part."


def acceptance_message(offer: float) -> str:
    return (
        f"Time is up, and your offer of ${offer:,.0f} meets the seller's terms. "
        f"The seller accepts: we have a deal at ${offer:,.0f}."
    )


def record_offers(session: Session, user_text: str, reply: str | None, now: datetime) -> None:
    """Update the offer ledger from one exchange.

    The user's offer wins the first-offer slot when both sides name a price
    in the same exchange. The counteroffer comes from whichever text belongs
    to the side opposite the first offer.
    """
    offers = session.offers
    user_offer = extract_offer(user_text)
    reply_offer = extract_offer(reply) if reply is not None else None

    if offers.first_offer is None:
        if user_offer is not None:
            offers.record_first_offer(user_offer, Speaker.USER, now)
        elif reply_offer is not None:
            offers.record_first_offer(reply_offer, Speaker.COUNTERPART, now)
        if offers.first_offer is not None:
            log.info(
                "first_offer_recorded",
                session_key=session.key,
                offer=offers.first_offer,
                by=offers.first_offer_by.value,
            )

    if offers.first_offer is not None and offers.counter_offer is None:
        countering = offers.first_offer_by.opposite
        candidate = user_offer if countering is Speaker.USER else reply_offer
        if candidate is not None and offers.record_counter_offer(candidate, countering, now):
            log.info(
                "counter_offer_recorded",
                session_key=session.key,
                offer=candidate,
                by=countering.value,
            )


class NegotiationStateMachine:
    """Advances a session by one turn."""

    def __init__(
        self,
        generator: DialogueGenerator,
        style_evaluator: Evaluator = evaluate_style,
        agreement_evaluator: Evaluator = evaluate_agreement,
    ):
        self.generator = generator
        self.style_evaluator = style_evaluator
        self.agreement_evaluator = agreement_evaluator
        self.graph = self.build_graph()

    def run_turn(
        self,
        session: Session,
        persona: PersonaConfig,
        incoming: str,
        now: datetime,
    ) -> str:
        """Process one user message and return the text to show the user."""
        result = self.graph.invoke(
            {
                "session": session,
                "persona": persona,
                "incoming": incoming,
                "now": now,
                "elapsed": None,
                "deadline_action": None,
                "reply": None,
                "generated": False,
                "entered_feedback": False,
                "response": "",
                "current_node": "",
            }
        )
        return result["response"]

    # ── Nodes ────────────────────────────────────────────────────

    def closed(self, state: TurnState) -> dict:
        return {"response": CLOSED_MESSAGE, "current_node": "closed"}

    def answer_question(self, state: TurnState) -> dict:
        """Feedback phase: answer questions, no negotiation bookkeeping."""
        session, now = state["session"], state["now"]
        history = build_history(session)
        try:
            answer = self.generator.generate(
                state["persona"].qa_prompt, history, state["incoming"]
            )
        except UpstreamError as exc:
            log.warning("generation_failed", session_key=session.key, mode="qa", error=str(exc))
            session.append(Speaker.USER, state["incoming"], now)
            return {"response": FALLBACK_MESSAGE, "current_node": "answer_question"}

        session.append(Speaker.USER, state["incoming"], now)
        session.append(Speaker.COUNTERPART, answer, now)
        return {"response": answer, "current_node": "answer_question"}

    def check_deadline(self, state: TurnState) -> dict:
        session = state["session"]
        elapsed = session.elapsed(state["now"])
        action = None
        if elapsed >= session.negotiation_window and not session.agreement.reached:
            offer = extract_offer(state["incoming"])
            if offer is not None and offer >= state["persona"].acceptable_offer:
                action = "concede"
            else:
                action = "expire"
        return {"elapsed": elapsed, "deadline_action": action, "current_node": "check_deadline"}

    def expire(self, state: TurnState) -> dict:
        session, now = state["session"], state["now"]
        session.append(Speaker.USER, state["incoming"], now)
        session.append(Speaker.SYSTEM, TIME_EXPIRED_MESSAGE, now)
        session.advance_phase(Phase.FEEDBACK_PENDING)
        log.info("deadline_expired", session_key=session.key, elapsed=str(state["elapsed"]))
        return {
            "response": TIME_EXPIRED_MESSAGE,
            "entered_feedback": True,
            "current_node": "expire",
        }

    def concede(self, state: TurnState) -> dict:
        """Past the deadline, an offer at or above the threshold is accepted outright."""
        session, now, incoming = state["session"], state["now"], state["incoming"]
        offer = extract_offer(incoming)

        session.append(Speaker.USER, incoming, now)
        record_offers(session, incoming, None, now)
        session.reach_agreement(offer, now)

        message = acceptance_message(offer)
        session.append(Speaker.SYSTEM, message, now)
        log.info("deadline_concession", session_key=session.key, offer=offer)
        return {"response": message, "entered_feedback": True, "current_node": "concede"}

    def generate(self, state: TurnState) -> dict:
        session, now, incoming = state["session"], state["now"], state["incoming"]
        history = build_history(session)
        try:
            reply = self.generator.generate(state["persona"].persona, history, incoming)
        except UpstreamError as exc:
            log.warning("generation_failed", session_key=session.key, mode="negotiate", error=str(exc))
            session.append(Speaker.USER, incoming, now)
            return {"generated": False, "response": FALLBACK_MESSAGE, "current_node": "generate"}

        session.append(Speaker.USER, incoming, now)
        session.append(Speaker.COUNTERPART, reply, now)
        return {"generated": True, "reply": reply, "current_node": "generate"}

    def detect_offers(self, state: TurnState) -> dict:
        record_offers(state["session"], state["incoming"], state["reply"], state["now"])
        return {"current_node": "detect_offers"}

    def detect_agreement(self, state: TurnState) -> dict:
        session, reply = state["session"], state["reply"]
        if not detects_agreement(state["incoming"], reply):
            return {"response": reply, "current_node": "detect_agreement"}

        if session.offers.first_offer is None:
            log.debug("agreement_ignored_without_offer", session_key=session.key)
            return {"response": reply, "current_node": "detect_agreement"}

        session.reach_agreement(reply, state["now"])
        log.info("agreement_reached", session_key=session.key)
        return {"response": reply, "entered_feedback": True, "current_node": "detect_agreement"}

    def feedback(self, state: TurnState) -> dict:
        session = state["session"]
        message = compose_feedback(
            session,
            state["persona"],
            style_evaluator=self.style_evaluator,
            agreement_evaluator=self.agreement_evaluator,
        )
        session.append(Speaker.SYSTEM, message, state["now"])
        return {"response": message, "current_node": "feedback"}

    # ── Conditional edges ────────────────────────────────────────

    @staticmethod
    def route_turn(state: TurnState) -> str:
        phase = state["session"].phase
        if phase is Phase.CLOSED:
            return "closed"
        if phase is Phase.FEEDBACK_PENDING:
            return "answer_question"
        return "check_deadline"

    @staticmethod
    def after_deadline(state: TurnState) -> str:
        return state["deadline_action"] or "generate"

    @staticmethod
    def after_generate(state: TurnState) -> str:
        if not state["generated"]:
            return END  # fallback already in the response
        return "detect_offers"

    @staticmethod
    def after_agreement(state: TurnState) -> str:
        if state["entered_feedback"]:
            return "feedback"
        return END

    # ── Build graph ──────────────────────────────────────────────

    def build_graph(self):
        """Build and compile the turn graph."""
        graph = StateGraph(TurnState)

        graph.add_node("closed", self.closed)
        graph.add_node("answer_question", self.answer_question)
        graph.add_node("check_deadline", self.check_deadline)
        graph.add_node("expire", self.expire)
        graph.add_node("concede", self.concede)
        graph.add_node("generate", self.generate)
        graph.add_node("detect_offers", self.detect_offers)
        graph.add_node("detect_agreement", self.detect_agreement)
        graph.add_node("feedback", self.feedback)

        graph.add_conditional_edges(
            START, self.route_turn, ["closed", "answer_question", "check_deadline"]
        )
        graph.add_conditional_edges(
            "check_deadline", self.after_deadline, ["expire", "concede", "generate"]
        )
        graph.add_conditional_edges("generate", self.after_generate, ["detect_offers", END])
        graph.add_edge("detect_offers", "detect_agreement")
        graph.add_conditional_edges("detect_agreement", self.after_agreement, ["feedback", END])
        graph.add_edge("closed", END)
        graph.add_edge("answer_question", END)
        graph.add_edge("expire", END)
        graph.add_edge("concede", END)
        graph.add_edge("feedback", END)

        return graph.compile()
