"""
Unit tests for the decision engines.

The Gemini engine is exercised with a fake model exposing
``generate_content_async`` so no Vertex AI call is made.
"""
import asyncio
from types import SimpleNamespace

import pytest
from tenacity import wait_none

from autofi_agents.config import settings
from autofi_agents.engines.decision import DecisionEngine, GeminiDecisionEngine, StaticDecisionEngine

HANG = object()


class FakeModel:
    """Plays back outcomes: text, an exception to raise, or HANG."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0)
        if outcome is HANG:
            await asyncio.sleep(10)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(text=outcome, usage_metadata=SimpleNamespace(total_token_count=42))


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    """Skip tenacity's exponential waits between attempts."""
    monkeypatch.setattr(GeminiDecisionEngine.decide.retry, "wait", wait_none())


@pytest.mark.asyncio
class TestGeminiDecisionEngine:

    async def test_returns_model_text(self):
        model = FakeModel('{"steps": ["swap"]}')
        engine = GeminiDecisionEngine(model=model, model_name="gemini-test")

        reasoning = await engine.decide("Rebalance", {"balance": 1})

        assert reasoning == '{"steps": ["swap"]}'
        assert model.prompts == ["Rebalance"]
        assert engine.model_name == "gemini-test"

    async def test_retries_connection_errors(self):
        model = FakeModel(ConnectionError("reset"), "recovered")
        engine = GeminiDecisionEngine(model=model)

        assert await engine.decide("x") == "recovered"
        assert len(model.prompts) == 2

    async def test_gives_up_after_max_retries(self):
        model = FakeModel(*[ConnectionError("down")] * settings.llm_max_retries)
        engine = GeminiDecisionEngine(model=model)

        with pytest.raises(ConnectionError):
            await engine.decide("x")

        assert len(model.prompts) == settings.llm_max_retries

    async def test_timeout_is_retried(self, monkeypatch):
        monkeypatch.setattr(settings, "llm_timeout", 0.01)
        model = FakeModel(HANG, "late but fine")
        engine = GeminiDecisionEngine(model=model)

        assert await engine.decide("x") == "late but fine"

    async def test_other_errors_are_not_retried(self):
        model = FakeModel(ValueError("bad request"), "never reached")
        engine = GeminiDecisionEngine(model=model)

        with pytest.raises(ValueError):
            await engine.decide("x")

        assert len(model.prompts) == 1

    async def test_missing_text_becomes_empty_string(self):
        model = FakeModel(None)
        engine = GeminiDecisionEngine(model=model)

        assert await engine.decide("x") == ""


@pytest.mark.asyncio
async def test_static_engine_counts_calls():
    engine = StaticDecisionEngine('{"steps": []}')

    assert await engine.decide("a") == '{"steps": []}'
    assert await engine.decide("b", {"k": 1}) == '{"steps": []}'
    assert engine.calls == 2


def test_engines_satisfy_protocol():
    assert isinstance(StaticDecisionEngine(), DecisionEngine)
    assert isinstance(GeminiDecisionEngine(model=FakeModel()), DecisionEngine)
