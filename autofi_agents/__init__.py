"""
Multi-agent coordination core for blockchain automation.

Treasury, DeFi, NFT, governance and donation agents reason about user
intents, produce transaction plans and pass every proposed transaction
through a shared risk gate. Agents cooperate through an in-process swarm
(message bus + task registry).
"""
from autofi_agents.agents import AgentFactory, SpecializedAgent, parse_plan
from autofi_agents.engines import (
    GeminiDecisionEngine,
    SpendingLimitRiskEngine,
    SpendingLimits,
    StaticDecisionEngine,
)
from autofi_agents.errors import (
    AgentNotFoundError,
    AlreadyRegisteredError,
    AutofiAgentsError,
    CapacityExceededError,
    DispatchLimitExceededError,
    InvalidTaskTransitionError,
    TaskNotFoundError,
    UnknownAgentTypeError,
)
from autofi_agents.models import (
    AgentMessage,
    AgentResponse,
    AgentType,
    ProcessPromptOptions,
    SwarmConfig,
    TransactionContext,
    ValidationResult,
)
from autofi_agents.service import SwarmService
from autofi_agents.swarm import EventBus, SwarmCoordinator

__version__ = "0.1.0"

__all__ = [
    "AgentFactory",
    "AgentMessage",
    "AgentNotFoundError",
    "AgentResponse",
    "AgentType",
    "AlreadyRegisteredError",
    "AutofiAgentsError",
    "CapacityExceededError",
    "DispatchLimitExceededError",
    "EventBus",
    "GeminiDecisionEngine",
    "InvalidTaskTransitionError",
    "ProcessPromptOptions",
    "SpecializedAgent",
    "SpendingLimitRiskEngine",
    "SpendingLimits",
    "StaticDecisionEngine",
    "SwarmConfig",
    "SwarmCoordinator",
    "SwarmService",
    "TaskNotFoundError",
    "TransactionContext",
    "UnknownAgentTypeError",
    "ValidationResult",
    "parse_plan",
]
