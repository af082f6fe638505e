"""Tests for the OpenAI dialogue generator adapter."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage

from dealroom.agents.generator import OpenAIDialogueGenerator, build_history
from dealroom.core.errors import UpstreamError
from dealroom.core.models import Identity, Session, Speaker

from conftest import T0, WINDOW


def _response(*texts):
    blocks = [SimpleNamespace(text=t) for t in texts]
    return SimpleNamespace(output=[SimpleNamespace(type="message", content=blocks)])


@pytest.fixture
def client():
    return MagicMock()


class TestOpenAIDialogueGenerator:
    def test_builds_input_and_returns_text(self, client):
        client.responses.create.return_value = _response("I'm asking $1,200,000.")
        generator = OpenAIDialogueGenerator(model="test-model", client=client)

        reply = generator.generate(
            "persona", [HumanMessage(content="Hi"), AIMessage(content="Hello.")], "Price?"
        )

        assert reply == "I'm asking $1,200,000."
        kwargs = client.responses.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["instructions"] == "persona"
        assert kwargs["input"] == [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello."},
            {"role": "user", "content": "Price?"},
        ]

    def test_openai_error_becomes_upstream(self, client):
        request = httpx.Request("POST", "https://api.openai.com/v1/responses")
        client.responses.create.side_effect = openai.APITimeoutError(request=request)
        generator = OpenAIDialogueGenerator(model="test-model", client=client)

        with pytest.raises(UpstreamError):
            generator.generate("persona", [], "Hi")

    def test_empty_reply_is_upstream_error(self, client):
        client.responses.create.return_value = _response("   ")
        generator = OpenAIDialogueGenerator(model="test-model", client=client)

        with pytest.raises(UpstreamError):
            generator.generate("persona", [], "Hi")


class TestBuildHistory:
    def test_system_turns_show_as_counterpart_side(self):
        session = Session(
            identity=Identity(name="Dana", email="dana@example.com"),
            session_start=T0,
            negotiation_window=WINDOW,
            persona_id="seller",
        )
        session.append(Speaker.USER, "Hi", T0)
        session.append(Speaker.COUNTERPART, "Hello.", T0)
        session.append(Speaker.SYSTEM, "Time is up.", T0)

        history = build_history(session)
        assert [type(m) for m in history] == [HumanMessage, AIMessage, AIMessage]
        assert history[2].content == "Time is up."
