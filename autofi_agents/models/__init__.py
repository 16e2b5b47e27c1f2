"""
Pydantic models for data validation and structured outputs.

This module centralizes all data contracts used across the package:
- Swarm protocols (messages and events)
- Registry models (directory entries, tasks)
- Agent configuration, risk and response models
"""
from autofi_agents.models.protocols import (
    BROADCAST,
    AgentMessage,
    BroadcastScope,
    MessageType,
    SwarmEvent,
    SwarmEventType,
)
from autofi_agents.models.schemas import (
    AgentDefaults,
    AgentDirectoryEntry,
    AgentOverrides,
    AgentResponse,
    AgentStatus,
    AgentTemplate,
    AgentTemplateOverride,
    AgentType,
    Plan,
    ProcessPromptOptions,
    RawPlan,
    RiskSummary,
    SpecializedAgentConfig,
    StructuredPlan,
    SwarmConfig,
    SwarmTask,
    TaskPriority,
    TaskStatus,
    TransactionContext,
    ValidationResult,
)

__all__ = [
    # Swarm Protocols
    "BROADCAST",
    "AgentMessage",
    "BroadcastScope",
    "MessageType",
    "SwarmEvent",
    "SwarmEventType",

    # Registry
    "AgentDirectoryEntry",
    "AgentStatus",
    "SwarmConfig",
    "SwarmTask",
    "TaskPriority",
    "TaskStatus",

    # Agent Configuration
    "AgentDefaults",
    "AgentOverrides",
    "AgentTemplate",
    "AgentTemplateOverride",
    "AgentType",
    "SpecializedAgentConfig",

    # Risk and Output
    "AgentResponse",
    "Plan",
    "ProcessPromptOptions",
    "RawPlan",
    "RiskSummary",
    "StructuredPlan",
    "TransactionContext",
    "ValidationResult",
]
