"""Dialogue generation: the counterpart's replies.

The engine only depends on the ``DialogueGenerator`` protocol. The OpenAI
adapter below is the production implementation; tests script their own.
"""

from typing import Protocol

import openai
import structlog
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from dealroom.core.errors import UpstreamError
from dealroom.core.models import Session, Speaker

log = structlog.get_logger(__name__)


class DialogueGenerator(Protocol):
    def generate(
        self,
        persona_prompt: str,
        history: list[BaseMessage],
        new_user_text: str,
    ) -> str:
        """Return the counterpart's reply. Raise UpstreamError on failure."""
        ...


def build_history(session: Session) -> list[BaseMessage]:
    """Map the session transcript onto chat messages.

    System-authored turns are presented as the counterpart's side so the
    model sees what the participant saw.
    """
    messages: list[BaseMessage] = []
    for turn in session.history:
        if turn.speaker is Speaker.USER:
            messages.append(HumanMessage(content=turn.text))
        else:
            messages.append(AIMessage(content=turn.text))
    return messages


def _to_openai_input(history: list[BaseMessage], new_user_text: str) -> list[dict]:
    items = []
    for message in history:
        role = "user" if isinstance(message, HumanMessage) else "assistant"
        items.append({"role": role, "content": message.content})
    items.append({"role": "user", "content": new_user_text})
    return items


def _extract_text(output_items) -> str:
    """Extract text content from OpenAI response output items."""
    texts = []
    for item in output_items:
        if hasattr(item, "type") and item.type == "message":
            for block in item.content:
                if hasattr(block, "text"):
                    texts.append(block.text)
        elif hasattr(item, "text"):
            texts.append(item.text)
    return "\n".join(texts) if texts else ""


class OpenAIDialogueGenerator:
    """Counterpart replies from the OpenAI Responses API."""

    def __init__(self, model: str, timeout: float = 30.0, client=None):
        self.model = model
        self.client = client or openai.OpenAI(timeout=timeout, max_retries=1)

    def generate(
        self,
        persona_prompt: str,
        history: list[BaseMessage],
        new_user_text: str,
    ) -> str:
        try:
            response = self.client.responses.create(
                model=self.model,
                input=_to_openai_input(history, new_user_text),
                instructions=persona_prompt,
            )
        except openai.OpenAIError as exc:
            log.warning("openai_request_failed", model=self.model, error=str(exc))
            raise UpstreamError(str(exc)) from exc

        text = _extract_text(response.output).strip()
        if not text:
            raise UpstreamError("empty reply from model")
        return text
