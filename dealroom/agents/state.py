"""LangGraph state definition for one negotiation turn."""

from datetime import datetime, timedelta
from typing import Optional, TypedDict

from dealroom.core.models import Session
from dealroom.core.registry import PersonaConfig


class TurnState(TypedDict):
    session: Session  # mutated in place by the nodes
    persona: PersonaConfig
    incoming: str
    now: datetime
    elapsed: Optional[timedelta]
    deadline_action: Optional[str]  # "expire" | "concede" | None
    reply: Optional[str]
    generated: bool
    entered_feedback: bool
    response: str
    current_node: str
