"""
Swarm service - orchestration facade over the factory and the swarm.

Spawns agents into a swarm, routes submitted tasks to an agent of the
requested role and runs the assigned agent on the task, closing the task with
the agent's response or its error.
"""
from typing import Any, Dict, List, Optional, Sequence, Union

from autofi_agents.agents.base_agent import SpecializedAgent
from autofi_agents.agents.factory import AgentFactory
from autofi_agents.errors import AgentNotFoundError, InvalidTaskTransitionError, TaskNotFoundError
from autofi_agents.models.protocols import SwarmEvent
from autofi_agents.models.schemas import (
    AgentResponse,
    AgentStatus,
    AgentType,
    ProcessPromptOptions,
    SwarmTask,
    TaskPriority,
    TaskStatus,
    TransactionContext,
)
from autofi_agents.swarm.coordinator import SWARM_EVENT_TOPIC, SwarmCoordinator
from autofi_agents.utils.logger import get_logger

logger = get_logger(__name__)


class SwarmService:
    """
    Owns a swarm and the agents spawned into it.

    Example:
        swarm = SwarmCoordinator(SwarmConfig(id="main-swarm", max_agents=10))
        service = SwarmService(factory, swarm)
        service.spawn("defi", "defi-01", "DeFi Strategist")

        task = service.submit_task("Find the best cUSD yield", role="defi")
        response = await service.run_task(task.id)
    """

    def __init__(self, factory: AgentFactory, swarm: SwarmCoordinator):
        self.factory = factory
        self.swarm = swarm
        self._agents: Dict[str, SpecializedAgent] = {}

        self.swarm.subscribe(SWARM_EVENT_TOPIC, self._log_event)

    def _log_event(self, event: SwarmEvent) -> None:
        logger.info(
            "swarm_event",
            swarm_id=self.swarm.config.id,
            event_type=event.type.value,
            payload=event.payload
        )

    def spawn(
        self,
        agent_type: Union[str, AgentType],
        agent_id: str,
        name: str,
        **overrides: Any
    ) -> SpecializedAgent:
        """Create an agent through the factory and join it to this swarm."""
        config = {"id": agent_id, "name": name, **overrides}
        agent = self.factory.create(agent_type, config, swarm=self.swarm)
        self._agents[agent.id] = agent
        return agent

    def retire(self, agent_id: str) -> None:
        """Remove an agent from the swarm; unknown ids are ignored."""
        agent = self._agents.pop(agent_id, None)
        if agent is not None:
            agent.leave_swarm()

    def get_agent(self, agent_id: str) -> SpecializedAgent:
        agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    def list_agents(self) -> List[SpecializedAgent]:
        return list(self._agents.values())

    def submit_task(
        self,
        description: str,
        role: Optional[Union[str, AgentType]] = None,
        agent_id: Optional[str] = None,
        priority: TaskPriority = TaskPriority.MEDIUM
    ) -> SwarmTask:
        """
        Create a task and assign it.

        The task goes to ``agent_id`` if given, otherwise to the first active
        agent whose role matches ``role``. With neither, it stays pending.

        Raises:
            AgentNotFoundError: If no registered agent matches
        """
        target = agent_id
        if target is None and role is not None:
            target = self._pick_agent(role)

        task = self.swarm.create_task(description, priority)
        if target is None:
            return task
        return self.swarm.assign_task(task.id, target)

    def _pick_agent(self, role: Union[str, AgentType]) -> str:
        role_name = role.value if isinstance(role, AgentType) else str(role)
        for entry in self.swarm.get_active_agents():
            if entry.role == role_name and entry.status == AgentStatus.ACTIVE and entry.id in self._agents:
                return entry.id
        raise AgentNotFoundError(f"<role:{role_name}>")

    async def run_task(
        self,
        task_id: str,
        prompt: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        proposed_transactions: Optional[Sequence[TransactionContext]] = None
    ) -> AgentResponse:
        """
        Run the assigned agent on a task and close the task.

        The task description is used as the prompt unless ``prompt`` is given.
        On success the task completes with the serialized response; on any
        failure it is marked failed and the error is re-raised.

        Raises:
            TaskNotFoundError: Unknown task id
            AgentNotFoundError: Task is unassigned or its agent is not managed here
            InvalidTaskTransitionError: The task already completed or failed
        """
        task = self.swarm.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        if task.status.is_terminal:
            raise InvalidTaskTransitionError(task_id, task.status.value, TaskStatus.IN_PROGRESS.value)
        if task.assigned_to is None:
            raise AgentNotFoundError(f"<unassigned:{task_id}>")

        agent = self.get_agent(task.assigned_to)
        options = ProcessPromptOptions(
            context=context,
            proposed_transactions=list(proposed_transactions or [])
        )

        try:
            response = await agent.process_prompt(prompt or task.description, options)
        except Exception as e:
            logger.error("task_run_failed", error=e, task_id=task_id, agent_id=agent.id)
            self.swarm.fail_task(task_id, {"error_type": type(e).__name__, "error_message": str(e)})
            raise

        self.swarm.complete_task(task_id, response.model_dump(mode="json"))
        return response
