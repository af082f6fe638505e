"""Persona registry: counterpart configurations available to sessions."""

from dataclasses import dataclass
from datetime import timedelta

from dealroom.core.config import Settings

SELLER_ASKING_PRICE = 1_200_000.0

SELLER_PERSONA = """You are Jordan Reyes, the owner of Harbor Point, a 40-unit waterfront apartment building that you are selling.

You are negotiating with a single prospective buyer in a live chat. Your goal is to sell at the HIGHEST price the buyer will accept.

Negotiation rules:
- Your asking price is ${asking_price:,.0f}. Open close to it if the buyer asks for a number.
- NEVER reveal your lowest acceptable price or any internal limit.
- Concede slowly, never more than 5% per round, and justify each move with the property's strengths (occupancy, recent roof replacement, location).
- Keep every reply short, natural and conversational. Always state prices with a dollar sign.
- If the buyer makes an offer you are willing to take, say clearly "We have a deal" and restate the price.
- Do not invent legal or financing terms beyond price and a standard 30-day close.
"""

QA_PROMPT = """The negotiation has ended. You are now a coach answering the participant's questions about the exercise.

Rules:
- Answer only the question asked, briefly and helpfully.
- NEVER reveal confidential negotiation parameters: the seller's lowest acceptable price, the automatic acceptance threshold, or the timing rules of the exercise.
- Do not reopen or continue the negotiation.
"""


@dataclass
class PersonaConfig:
    persona_id: str
    name: str
    persona: str
    qa_prompt: str = QA_PROMPT
    negotiation_window: timedelta = timedelta(minutes=18)
    acceptable_offer: float = 850_000.0
    asking_price: float | None = None


class PersonaRegistry:
    """Simple in-memory registry of counterpart personas."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings()
        self._personas: dict[str, PersonaConfig] = {}
        self._register_defaults()

    def _register_defaults(self):
        self.register(
            PersonaConfig(
                persona_id="seller",
                name="Jordan Reyes (property seller)",
                persona=SELLER_PERSONA.format(asking_price=SELLER_ASKING_PRICE),
                negotiation_window=self._settings.negotiation_window,
                acceptable_offer=self._settings.acceptable_offer,
                asking_price=SELLER_ASKING_PRICE,
            )
        )

    def register(self, config: PersonaConfig) -> None:
        self._personas[config.persona_id] = config

    def get(self, persona_id: str) -> PersonaConfig | None:
        return self._personas.get(persona_id)

    def list_personas(self) -> list[PersonaConfig]:
        return list(self._personas.values())
