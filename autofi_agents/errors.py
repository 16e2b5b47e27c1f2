"""
Exception taxonomy for the agent swarm.

Every error carries a stable, machine-checkable ``kind`` so callers can branch
on the failure without parsing messages.
"""
from typing import Optional


class AutofiAgentsError(Exception):
    """Base exception for all swarm, agent and factory errors."""

    kind = "AUTOFI_AGENTS_ERROR"

    def __init__(self, message: str, kind: Optional[str] = None) -> None:
        if kind:
            self.kind = kind
        self.message = message
        super().__init__(f"[{self.kind}] {message}")


class AlreadyRegisteredError(AutofiAgentsError):
    """Raised when an agent id is registered twice without unregistering."""

    kind = "ALREADY_REGISTERED"

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent {agent_id} already registered")


class CapacityExceededError(AutofiAgentsError):
    """Raised when registering would exceed the swarm's max agent count."""

    kind = "CAPACITY_EXCEEDED"

    def __init__(self, max_agents: int) -> None:
        self.max_agents = max_agents
        super().__init__(f"Swarm full. Max agents: {max_agents}")


class TaskNotFoundError(AutofiAgentsError):
    """Raised when a task id is not present in the registry."""

    kind = "TASK_NOT_FOUND"

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class AgentNotFoundError(AutofiAgentsError):
    """Raised when an agent id is not registered with the swarm."""

    kind = "AGENT_NOT_FOUND"

    def __init__(self, agent_id: str) -> None:
        self.agent_id = agent_id
        super().__init__(f"Agent {agent_id} not found")


class UnknownAgentTypeError(AutofiAgentsError):
    """Raised by the factory for a type outside the known personas."""

    kind = "UNKNOWN_AGENT_TYPE"

    def __init__(self, agent_type: object) -> None:
        self.agent_type = agent_type
        super().__init__(f"Unknown agent type: {agent_type}")


class InvalidTaskTransitionError(AutofiAgentsError):
    """Raised when a terminal task (completed/failed) is transitioned again."""

    kind = "INVALID_TASK_TRANSITION"

    def __init__(self, task_id: str, current: str, target: str) -> None:
        self.task_id = task_id
        self.current = current
        self.target = target
        super().__init__(f"Task {task_id} is {current}; cannot move to {target}")


class DispatchLimitExceededError(AutofiAgentsError):
    """Raised when a re-entrant message cascade exceeds the delivery bound."""

    kind = "DISPATCH_LIMIT_EXCEEDED"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Dispatch cascade exceeded {limit} deliveries")
