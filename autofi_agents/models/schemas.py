"""
Pydantic schemas for the swarm registry, agent configuration and risk output.

This module defines:
1. Swarm registry models (directory entries, tasks, swarm config)
2. Agent configuration models (agent config, factory defaults/templates)
3. Risk models (transaction context, validation results, risk summary)
4. Agent output models (plans and the final agent response)
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autofi_agents.config import settings


# ============================================================================
# SWARM REGISTRY
# ============================================================================

class AgentStatus(str, Enum):
    """Availability of a registered agent."""
    ACTIVE = "active"
    BUSY = "busy"
    OFFLINE = "offline"


class TaskStatus(str, Enum):
    """Task lifecycle: pending -> in_progress -> completed | failed."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class TaskPriority(str, Enum):
    """Task priority levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AgentDirectoryEntry(BaseModel):
    """Directory record the swarm keeps for each registered agent."""
    id: str = Field(..., description="Agent identifier")
    role: str = Field(..., description="Agent role (its persona type)")
    status: AgentStatus = Field(default=AgentStatus.ACTIVE, description="Current status")


class SwarmTask(BaseModel):
    """Unit of work tracked by the swarm registry."""
    id: str = Field(..., description="Unique task ID")
    description: str = Field(..., description="What needs to be done")
    assigned_to: Optional[str] = Field(default=None, description="Agent working on the task")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Task status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    result: Optional[Any] = Field(default=None, description="Result or error payload")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation time")
    updated_at: datetime = Field(default_factory=datetime.now, description="Last transition time")


class SwarmConfig(BaseModel):
    """Per-swarm configuration; limits default to the global settings."""
    id: str = Field(default="main-swarm", description="Swarm identifier")
    name: str = Field(default="AutoFi Swarm", description="Human readable name")
    max_agents: Optional[int] = Field(
        default_factory=lambda: settings.swarm_max_agents,
        ge=1,
        description="Max registered agents (None for unlimited)"
    )
    max_cascade: int = Field(
        default_factory=lambda: settings.swarm_max_cascade,
        ge=1,
        description="Max deliveries in one re-entrant dispatch cascade"
    )
    message_ttl_seconds: Optional[int] = Field(
        default_factory=lambda: settings.swarm_message_ttl_seconds,
        ge=1,
        description="Retention window for prune_message_log"
    )


# ============================================================================
# AGENT CONFIGURATION
# ============================================================================

class AgentType(str, Enum):
    """Closed set of agent personas."""
    TREASURY = "treasury"
    DEFI = "defi"
    NFT = "nft"
    GOVERNANCE = "governance"
    DONATION = "donation"


class SpecializedAgentConfig(BaseModel):
    """
    Immutable configuration snapshot handed to an agent at construction.

    ``objectives`` and ``prompt_preamble`` may be left unset, in which case the
    agent falls back to its persona defaults.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Agent identifier")
    type: AgentType = Field(..., description="Persona type")
    name: str = Field(..., min_length=1, description="Display name")
    description: Optional[str] = Field(default=None, description="What this agent is for")
    objectives: Optional[List[str]] = Field(default=None, description="Numbered objectives")
    prompt_preamble: Optional[str] = Field(default=None, description="Persona preamble")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")


class AgentDefaults(BaseModel):
    """Factory-level defaults applied beneath call-site values."""
    description: Optional[str] = None
    objectives: Optional[List[str]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AgentTemplateOverride(BaseModel):
    """Per-type override of a built-in persona template."""
    prompt_preamble: Optional[str] = None
    objectives: Optional[List[str]] = None


class AgentTemplate(BaseModel):
    """Resolved persona template the factory builds configs from."""
    model_config = ConfigDict(frozen=True)

    prompt_preamble: str
    objectives: List[str]


class AgentOverrides(BaseModel):
    """Call-site values accepted by ``AgentFactory.create``."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    objectives: Optional[List[str]] = None
    prompt_preamble: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# RISK MODELS
# ============================================================================

class TransactionContext(BaseModel):
    """A transaction an agent proposes, as seen by the risk engine."""
    agent_id: str = Field(..., min_length=1, description="Agent proposing the transaction")
    owner: Optional[str] = Field(default=None, description="Wallet owner address")
    type: Literal["transfer", "contract_call", "deployment"] = Field(..., description="Transaction kind")
    to: Optional[str] = Field(default=None, description="Recipient address")
    value: Optional[int] = Field(default=None, ge=0, description="Value in base units")
    token_address: Optional[str] = Field(default=None, description="ERC-20 token address")
    function_signature: Optional[str] = Field(default=None, description="Called function")
    protocol: Optional[str] = Field(default=None, description="DeFi protocol name")
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[datetime] = Field(default=None)
    simulated_changes: Optional[Dict[str, Any]] = Field(default=None)

    @field_validator("value", mode="before")
    @classmethod
    def _parse_value(cls, value: Any) -> Any:
        """Accept ints, whole floats, decimal strings and 0x-prefixed hex strings."""
        if isinstance(value, str):
            text = value.strip()
            if text.lower().startswith("0x"):
                return int(text, 16)
            return int(text)
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"value must be a whole number of base units, got {value}")
            return int(value)
        return value


class ValidationResult(BaseModel):
    """Verdict returned by the risk engine for one transaction."""
    is_valid: bool = Field(..., description="Whether the transaction may proceed")
    risk_score: float = Field(..., description="Risk score (engine-defined scale)")
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class RiskSummary(BaseModel):
    """Aggregate risk across every proposed transaction."""
    aggregate_score: float = Field(default=0.0, description="Mean risk score (0 when empty)")
    evaluations: List[ValidationResult] = Field(default_factory=list)


# ============================================================================
# AGENT OUTPUT
# ============================================================================

class StructuredPlan(BaseModel):
    """Plan extracted as JSON from the reasoning text."""
    kind: Literal["structured"] = "structured"
    data: Any = Field(..., description="Parsed JSON value")


class RawPlan(BaseModel):
    """Fallback plan when the reasoning text holds no parseable JSON."""
    kind: Literal["raw"] = "raw"
    reasoning: str = Field(..., description="Original reasoning text")
    steps: List[str] = Field(default_factory=list, description="Non-empty lines of the reasoning")


Plan = Union[StructuredPlan, RawPlan]


class ProcessPromptOptions(BaseModel):
    """Optional inputs to ``SpecializedAgent.process_prompt``."""
    context: Optional[Dict[str, Any]] = None
    proposed_transactions: List[TransactionContext] = Field(default_factory=list)


class AgentResponse(BaseModel):
    """Terminal artifact of one ``process_prompt`` call."""
    agent_id: str = Field(..., description="Agent that produced the response")
    type: AgentType = Field(..., description="Persona type of the agent")
    reasoning: str = Field(..., description="Raw decision engine output")
    plan: Plan = Field(..., discriminator="kind", description="Structured or raw plan")
    risk_summary: RiskSummary = Field(default_factory=RiskSummary)
    recommendations: List[str] = Field(default_factory=list, description="Deduplicated advice")
    telemetry: Dict[str, Any] = Field(default_factory=dict)
