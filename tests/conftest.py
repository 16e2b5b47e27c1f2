"""
Shared fixtures and fakes for the test suite.

The fakes stand in for the decision and risk engines so no test touches the
network.
"""
from typing import Any, Dict, List, Optional

import pytest

from autofi_agents.agents.factory import AgentFactory
from autofi_agents.models.schemas import SwarmConfig, TransactionContext, ValidationResult
from autofi_agents.swarm.coordinator import SwarmCoordinator


class FakeDecisionEngine:
    """Async decision engine that records prompts and returns canned reasoning."""

    def __init__(self, reasoning: str = '{"steps": ["noop"]}', error: Optional[Exception] = None):
        self.reasoning = reasoning
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def decide(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> str:
        self.calls.append({"prompt": prompt, "context": context})
        if self.error:
            raise self.error
        return self.reasoning


class SyncDecisionEngine:
    """Synchronous variant: agents must accept plain return values too."""

    def __init__(self, reasoning: str):
        self.reasoning = reasoning

    def decide(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> str:
        return self.reasoning


class FakeRiskEngine:
    """
    Risk engine returning queued verdicts in order.

    Each verdict is a ValidationResult; when the queue is empty a valid,
    zero-risk verdict is returned.
    """

    def __init__(self, verdicts: Optional[List[ValidationResult]] = None, error: Optional[Exception] = None):
        self.verdicts = list(verdicts or [])
        self.error = error
        self.seen: List[TransactionContext] = []

    async def validate_transaction(self, tx: TransactionContext) -> ValidationResult:
        self.seen.append(tx)
        if self.error:
            raise self.error
        if self.verdicts:
            return self.verdicts.pop(0)
        return ValidationResult(is_valid=True, risk_score=0)


def make_tx(agent_id: str = "treasury-01", **kwargs: Any) -> TransactionContext:
    data = {"agent_id": agent_id, "type": "transfer", "to": "0xabc", "value": 100}
    data.update(kwargs)
    return TransactionContext(**data)


@pytest.fixture
def swarm() -> SwarmCoordinator:
    return SwarmCoordinator(SwarmConfig(id="test-swarm", name="Test Swarm", max_agents=10))


@pytest.fixture
def decision_engine() -> FakeDecisionEngine:
    return FakeDecisionEngine()


@pytest.fixture
def risk_engine() -> FakeRiskEngine:
    return FakeRiskEngine()


@pytest.fixture
def factory(decision_engine, risk_engine) -> AgentFactory:
    return AgentFactory(decision_engine=decision_engine, risk_engine=risk_engine)
