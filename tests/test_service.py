"""
Integration tests for SwarmService: factory + swarm + agents end to end.
"""
import pytest

from autofi_agents.agents.factory import AgentFactory
from autofi_agents.errors import AgentNotFoundError, InvalidTaskTransitionError, TaskNotFoundError
from autofi_agents.models.protocols import SwarmEventType
from autofi_agents.models.schemas import AgentType, TaskPriority, TaskStatus
from autofi_agents.service import SwarmService
from autofi_agents.swarm.coordinator import SWARM_EVENT_TOPIC
from tests.conftest import FakeDecisionEngine, FakeRiskEngine, make_tx


@pytest.fixture
def service(factory, swarm):
    return SwarmService(factory, swarm)


class TestAgents:

    def test_spawn_registers_agent(self, service, swarm):
        agent = service.spawn("defi", "defi-01", "DeFi Strategist", description="Yield hunter")

        assert agent.type == AgentType.DEFI
        assert agent.get_config().description == "Yield hunter"
        assert swarm.get_agent_status("defi-01").role == "defi"
        assert service.get_agent("defi-01") is agent
        assert service.list_agents() == [agent]

    def test_retire_removes_agent(self, service, swarm):
        service.spawn("nft", "nft-01", "Minter")

        service.retire("nft-01")
        service.retire("nft-01")

        assert swarm.get_agent_status("nft-01") is None
        with pytest.raises(AgentNotFoundError):
            service.get_agent("nft-01")


class TestSubmitTask:

    def test_routes_by_role(self, service):
        service.spawn("treasury", "treasury-01", "Treasury")
        service.spawn("defi", "defi-01", "DeFi")

        task = service.submit_task("Find the best cUSD yield", role="defi", priority=TaskPriority.HIGH)

        assert task.assigned_to == "defi-01"
        assert task.status == TaskStatus.IN_PROGRESS
        assert task.priority == TaskPriority.HIGH

    def test_routes_to_explicit_agent(self, service):
        service.spawn("defi", "defi-01", "DeFi")
        service.spawn("defi", "defi-02", "DeFi")

        task = service.submit_task("Claim rewards", agent_id="defi-02")

        assert task.assigned_to == "defi-02"

    def test_without_target_stays_pending(self, service):
        task = service.submit_task("Someone do this")
        assert task.status == TaskStatus.PENDING

    def test_unknown_role_fails_before_creating_task(self, service, swarm):
        service.spawn("defi", "defi-01", "DeFi")

        with pytest.raises(AgentNotFoundError):
            service.submit_task("Vote", role=AgentType.GOVERNANCE)

        assert swarm.list_tasks() == []


@pytest.mark.asyncio
class TestRunTask:

    async def test_success_completes_task(self, service, swarm, decision_engine):
        service.spawn("treasury", "treasury-01", "Treasury")
        events = []
        swarm.subscribe(SWARM_EVENT_TOPIC, events.append)
        task = service.submit_task("Rebalance to 50/50", role="treasury")

        response = await service.run_task(task.id, context={"celo": 10}, proposed_transactions=[make_tx()])

        stored = swarm.get_task(task.id)
        assert stored.status == TaskStatus.COMPLETED
        assert stored.result["agent_id"] == "treasury-01"
        assert stored.result["plan"]["kind"] == response.plan.kind
        assert "Rebalance to 50/50" in decision_engine.calls[0]["prompt"]
        assert events[-1].type == SwarmEventType.TASK_COMPLETED

    async def test_prompt_overrides_description(self, service, decision_engine):
        service.spawn("nft", "nft-01", "Minter")
        task = service.submit_task("Mint badges", role="nft")

        await service.run_task(task.id, prompt="Mint 3 badges for the hackathon")

        assert "Mint 3 badges for the hackathon" in decision_engine.calls[0]["prompt"]

    async def test_failure_fails_task_and_reraises(self, swarm):
        failing = AgentFactory(FakeDecisionEngine(error=ConnectionError("model down")), FakeRiskEngine())
        service = SwarmService(failing, swarm)
        service.spawn("governance", "gov-01", "Gov")
        task = service.submit_task("Vote on proposal 7", role="governance")

        with pytest.raises(ConnectionError):
            await service.run_task(task.id)

        stored = swarm.get_task(task.id)
        assert stored.status == TaskStatus.FAILED
        assert stored.result == {"error_type": "ConnectionError", "error_message": "model down"}

    async def test_finished_task_is_rejected_before_running(self, swarm):
        engine = FakeDecisionEngine(error=ConnectionError("model down"))
        service = SwarmService(AgentFactory(engine, FakeRiskEngine()), swarm)
        service.spawn("treasury", "treasury-01", "Treasury")
        task = service.submit_task("Rebalance", role="treasury")
        swarm.complete_task(task.id, "done")

        with pytest.raises(InvalidTaskTransitionError) as exc_info:
            await service.run_task(task.id)

        assert exc_info.value.current == "completed"
        assert engine.calls == []
        stored = swarm.get_task(task.id)
        assert stored.status == TaskStatus.COMPLETED
        assert stored.result == "done"

    async def test_unknown_task(self, service):
        with pytest.raises(TaskNotFoundError):
            await service.run_task("task-missing")

    async def test_unassigned_task(self, service):
        task = service.submit_task("Nobody owns this")

        with pytest.raises(AgentNotFoundError):
            await service.run_task(task.id)
