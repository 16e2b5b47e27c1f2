"""
Pluggable ports used by agents: decision engines and risk engines.
"""
from autofi_agents.engines.decision import (
    DecisionEngine,
    GeminiDecisionEngine,
    StaticDecisionEngine,
)
from autofi_agents.engines.risk import (
    RiskEngine,
    SpendingLimitRiskEngine,
    SpendingLimits,
)

__all__ = [
    "DecisionEngine",
    "GeminiDecisionEngine",
    "StaticDecisionEngine",
    "RiskEngine",
    "SpendingLimitRiskEngine",
    "SpendingLimits",
]
