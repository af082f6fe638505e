"""Shared fixtures: scripted generator, fixed clock, wired orchestrator."""

from datetime import datetime, timedelta, timezone

import pytest

from dealroom.core.config import Settings
from dealroom.core.errors import UpstreamError
from dealroom.core.orchestrator import Orchestrator
from dealroom.core.registry import PersonaRegistry
from dealroom.core.store import SessionStore

T0 = datetime(2026, 1, 5, 14, 0, tzinfo=timezone.utc)
WINDOW = timedelta(minutes=18)


class FakeGenerator:
    """Returns scripted replies in order; can be switched to fail."""

    def __init__(self, replies=None, fail=False):
        self.replies = list(replies or [])
        self.fail = fail
        self.calls = []

    def generate(self, persona_prompt, history, new_user_text):
        self.calls.append(
            {"prompt": persona_prompt, "history": list(history), "text": new_user_text}
        )
        if self.fail:
            raise UpstreamError("model unavailable")
        if self.replies:
            return self.replies.pop(0)
        return "Let me think about that."


class FakeClock:
    def __init__(self, start=T0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def registry(settings):
    return PersonaRegistry(settings)


@pytest.fixture
def persona(registry):
    return registry.get("seller")


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def orchestrator(store, generator, registry, settings, clock):
    return Orchestrator(
        store=store,
        generator=generator,
        registry=registry,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def session_key(orchestrator):
    handle = orchestrator.start_session("Dana Cole", "dana@example.com", "ABC123")
    return handle.session_key
