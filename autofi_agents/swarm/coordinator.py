"""
Swarm coordinator - agent directory, message routing and task registry.

The coordinator is the single point of coordination for a set of cooperating
agents. It owns the agent directory, the append-only message log and the task
map; agents only hold a reference to it.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from autofi_agents.errors import (
    AgentNotFoundError,
    AlreadyRegisteredError,
    CapacityExceededError,
    InvalidTaskTransitionError,
    TaskNotFoundError,
)
from autofi_agents.models.protocols import (
    AgentMessage,
    BroadcastScope,
    SwarmEvent,
    SwarmEventType,
)
from autofi_agents.models.schemas import (
    AgentDirectoryEntry,
    AgentStatus,
    SwarmConfig,
    SwarmTask,
    TaskPriority,
    TaskStatus,
)
from autofi_agents.swarm.event_bus import EventBus, EventHandler
from autofi_agents.utils.logger import get_logger

logger = get_logger(__name__)

SWARM_EVENT_TOPIC = "swarm_event"


def message_topic(agent_id: str) -> str:
    """Topic on which ``agent_id`` receives its messages."""
    return f"message:{agent_id}"


def task_topic(agent_id: str) -> str:
    """Topic on which ``agent_id`` is notified of task assignments."""
    return f"task:{agent_id}"


class SwarmCoordinator:
    """
    In-process message bus and task-lifecycle registry.

    Responsibilities:
    - Agent directory (register / unregister, capacity limit)
    - Message routing (direct, role broadcast, global broadcast)
    - Task lifecycle (pending -> in_progress -> completed | failed)
    - Event notification on the ``swarm_event`` topic

    Example:
        swarm = SwarmCoordinator(SwarmConfig(id="main-swarm", max_agents=10))
        swarm.subscribe("swarm_event", print)
        swarm.register_agent("defi-01", "defi")
        task = swarm.create_task("Rebalance cUSD pool", TaskPriority.HIGH)
        swarm.assign_task(task.id, "defi-01")
    """

    def __init__(self, config: Optional[SwarmConfig] = None, event_bus: Optional[EventBus] = None):
        """
        Args:
            config: Swarm limits; defaults come from settings
            event_bus: Bus to publish on; a private one is created when omitted
        """
        self.config = config or SwarmConfig()
        self.event_bus = event_bus or EventBus(max_cascade=self.config.max_cascade)
        self.logger = logger.bind(swarm_id=self.config.id)

        self._agents: Dict[str, AgentDirectoryEntry] = {}
        self._tasks: Dict[str, SwarmTask] = {}
        self._message_log: List[AgentMessage] = []

        self.logger.info(
            "swarm_initialized",
            swarm_name=self.config.name,
            max_agents=self.config.max_agents
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        self.event_bus.subscribe(topic, handler)

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        self.event_bus.unsubscribe(topic, handler)

    # ------------------------------------------------------------------
    # Agent directory
    # ------------------------------------------------------------------

    def register_agent(self, agent_id: str, role: str) -> None:
        """
        Add an agent to the directory with status ``active``.

        Raises:
            AlreadyRegisteredError: If the id is already registered
            CapacityExceededError: If the swarm is at max_agents
        """
        if agent_id in self._agents:
            raise AlreadyRegisteredError(agent_id)

        max_agents = self.config.max_agents
        if max_agents is not None and len(self._agents) >= max_agents:
            raise CapacityExceededError(max_agents)

        self._agents[agent_id] = AgentDirectoryEntry(id=agent_id, role=role, status=AgentStatus.ACTIVE)

        self.logger.info("agent_registered", agent_id=agent_id, role=role)
        self._emit_event(SwarmEventType.AGENT_JOINED, {"agent_id": agent_id, "role": role})

    def unregister_agent(self, agent_id: str) -> None:
        """Remove an agent; unknown ids are a no-op."""
        if self._agents.pop(agent_id, None) is None:
            return

        self.logger.info("agent_unregistered", agent_id=agent_id)
        self._emit_event(SwarmEventType.AGENT_LEFT, {"agent_id": agent_id})

    def get_agent_status(self, agent_id: str) -> Optional[AgentDirectoryEntry]:
        entry = self._agents.get(agent_id)
        return entry.model_copy() if entry else None

    def get_active_agents(self) -> List[AgentDirectoryEntry]:
        """Snapshot of every registered agent (id, role, status)."""
        return [entry.model_copy() for entry in self._agents.values()]

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    def send_message(self, message: AgentMessage) -> None:
        """
        Log a message and deliver it to its recipients.

        Direct messages to an unregistered agent are dropped with a warning;
        delivery is best-effort and at-most-once. Broadcasts never reach the
        sender. Role-scoped broadcasts reach only agents with a matching role.
        """
        self._message_log.append(message)

        with self.event_bus.batch():
            self._emit_event(SwarmEventType.MESSAGE, {"message": message})

            if not message.is_broadcast:
                if message.to not in self._agents:
                    self.logger.warning(
                        "message_dropped_unknown_target",
                        message_id=message.id,
                        sender=message.sender,
                        target=message.to
                    )
                    return
                self.event_bus.publish(message_topic(message.to), message)
                return

            recipients = self._broadcast_recipients(message)
            for agent_id in recipients:
                self.event_bus.publish(message_topic(agent_id), message)

        self.logger.debug(
            "broadcast_dispatched",
            message_id=message.id,
            scope=message.scope.value if message.scope else BroadcastScope.GLOBAL.value,
            recipients=len(recipients)
        )

    def _broadcast_recipients(self, message: AgentMessage) -> List[str]:
        if message.scope == BroadcastScope.ROLE:
            return [
                agent_id
                for agent_id, entry in self._agents.items()
                if entry.role == message.role and agent_id != message.sender
            ]

        return [agent_id for agent_id in self._agents if agent_id != message.sender]

    def get_message_log(self, limit: Optional[int] = None) -> List[AgentMessage]:
        """Return the message log, oldest first (the last ``limit`` entries if given)."""
        if limit is not None:
            return list(self._message_log[-limit:]) if limit > 0 else []
        return list(self._message_log)

    def prune_message_log(self, now: Optional[datetime] = None) -> int:
        """
        Drop messages older than ``config.message_ttl_seconds``.

        Returns:
            Number of messages removed (0 when no TTL is configured)
        """
        ttl = self.config.message_ttl_seconds
        if not ttl:
            return 0

        cutoff = (now or datetime.now()) - timedelta(seconds=ttl)
        before = len(self._message_log)
        self._message_log = [m for m in self._message_log if m.timestamp >= cutoff]
        removed = before - len(self._message_log)

        if removed:
            self.logger.info("message_log_pruned", removed=removed, kept=len(self._message_log))
        return removed

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, description: str, priority: TaskPriority = TaskPriority.MEDIUM) -> SwarmTask:
        """Create a pending task and emit ``task_created``."""
        now = datetime.now()
        task_id = f"task-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"
        task = SwarmTask(
            id=task_id,
            description=description,
            status=TaskStatus.PENDING,
            priority=TaskPriority(priority),
            created_at=now,
            updated_at=now
        )
        self._tasks[task_id] = task

        self.logger.info("task_created", task_id=task_id, priority=task.priority.value)
        self._emit_event(SwarmEventType.TASK_CREATED, {"task_id": task_id, "status": task.status.value})
        return task.model_copy()

    def assign_task(self, task_id: str, agent_id: str) -> SwarmTask:
        """
        Assign a task to a registered agent and move it to ``in_progress``.

        Raises:
            TaskNotFoundError: Unknown task id
            AgentNotFoundError: Unknown agent id
            InvalidTaskTransitionError: The task already completed or failed
        """
        task = self._require_task(task_id)
        if agent_id not in self._agents:
            raise AgentNotFoundError(agent_id)
        self._check_transition(task, TaskStatus.IN_PROGRESS)

        task.assigned_to = agent_id
        task.status = TaskStatus.IN_PROGRESS
        task.updated_at = datetime.now()

        self.logger.info("task_assigned", task_id=task_id, agent_id=agent_id)
        snapshot = task.model_copy()
        with self.event_bus.batch():
            self._emit_event(SwarmEventType.TASK_ASSIGNED, {"task_id": task_id, "agent_id": agent_id})
            self.event_bus.publish(task_topic(agent_id), snapshot)
        return snapshot

    def complete_task(self, task_id: str, result: Any) -> SwarmTask:
        """Mark a task completed with ``result``."""
        task = self._finish_task(task_id, TaskStatus.COMPLETED, result)
        self._emit_event(SwarmEventType.TASK_COMPLETED, {"task_id": task_id, "result": result})
        return task

    def fail_task(self, task_id: str, error: Any) -> SwarmTask:
        """Mark a task failed; ``error`` is stored as the task result."""
        task = self._finish_task(task_id, TaskStatus.FAILED, error)
        self._emit_event(SwarmEventType.TASK_FAILED, {"task_id": task_id, "error": error})
        return task

    def get_task(self, task_id: str) -> Optional[SwarmTask]:
        task = self._tasks.get(task_id)
        return task.model_copy() if task else None

    def list_tasks(self, status: Optional[TaskStatus] = None) -> List[SwarmTask]:
        return [
            task.model_copy()
            for task in self._tasks.values()
            if status is None or task.status == status
        ]

    def _finish_task(self, task_id: str, status: TaskStatus, result: Any) -> SwarmTask:
        task = self._require_task(task_id)
        self._check_transition(task, status)

        task.status = status
        task.result = result
        task.updated_at = datetime.now()

        self.logger.info(
            "task_finished",
            task_id=task_id,
            status=status.value,
            agent_id=task.assigned_to
        )
        return task.model_copy()

    def _require_task(self, task_id: str) -> SwarmTask:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    @staticmethod
    def _check_transition(task: SwarmTask, target: TaskStatus) -> None:
        if task.status.is_terminal:
            raise InvalidTaskTransitionError(task.id, task.status.value, target.value)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _emit_event(self, event_type: SwarmEventType, payload: Dict[str, Any]) -> None:
        self.event_bus.publish(SWARM_EVENT_TOPIC, SwarmEvent(type=event_type, payload=payload))


