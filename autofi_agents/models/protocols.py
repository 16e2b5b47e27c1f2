"""
Communication protocols for agent-to-agent (A2A) interactions inside a swarm.

This module defines the message envelope every agent uses to talk to its
siblings and the event record the swarm emits on lifecycle changes.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Sentinel recipient for broadcast messages
BROADCAST = "broadcast"


class MessageType(str, Enum):
    """Intent of a swarm message."""
    PROPOSAL = "proposal"
    QUERY = "query"
    RESPONSE = "response"
    ALERT = "alert"
    HEARTBEAT = "heartbeat"


class BroadcastScope(str, Enum):
    """Who receives a broadcast message."""
    GLOBAL = "global"
    ROLE = "role"
    DIRECT = "direct"


class SwarmEventType(str, Enum):
    """Lifecycle events published on the ``swarm_event`` topic."""
    AGENT_JOINED = "agent_joined"
    AGENT_LEFT = "agent_left"
    MESSAGE = "message"
    TASK_CREATED = "task_created"
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    TASK_FAILED = "task_failed"


class AgentMessage(BaseModel):
    """
    Immutable message exchanged between agents.

    Attributes:
        id: Unique message identifier
        sender: Originating agent id (serialized as "from")
        to: Target agent id, or BROADCAST
        scope: Broadcast scope (ignored for direct messages)
        role: Target role when scope is ROLE
        type: Message intent
        content: Opaque payload
        timestamp: Creation time
        correlation_id: Links related messages (e.g. query/response)
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique message ID")
    sender: str = Field(..., alias="from", min_length=1, description="Agent that sent the message")
    to: str = Field(..., min_length=1, description="Target agent id or 'broadcast'")
    scope: Optional[BroadcastScope] = Field(default=None, description="Broadcast scope")
    role: Optional[str] = Field(default=None, description="Target role for role-scoped broadcasts")
    type: MessageType = Field(default=MessageType.PROPOSAL, description="Message intent")
    content: Any = Field(default=None, description="Message payload")
    timestamp: datetime = Field(default_factory=datetime.now, description="Message timestamp")
    correlation_id: Optional[str] = Field(default=None, description="ID linking related messages")

    @model_validator(mode="after")
    def _role_scope_needs_role(self) -> "AgentMessage":
        if self.scope == BroadcastScope.ROLE and not self.role:
            raise ValueError("role-scoped messages must name a role")
        return self

    @property
    def is_broadcast(self) -> bool:
        return self.to == BROADCAST


class SwarmEvent(BaseModel):
    """Event emitted by the swarm on the ``swarm_event`` topic."""
    type: SwarmEventType = Field(..., description="Event kind")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Event data")
    timestamp: datetime = Field(default_factory=datetime.now, description="Event timestamp")
