"""
Main entry point for the AutoFi agent swarm (CLI).

Spawns one agent per persona into a swarm and lets you route prompts to them:

    treasury: rebalance to 60% CELO / 40% cUSD
    defi: where should we park 5,000 cUSD?

Uses Gemini when GCP_PROJECT_ID is configured, otherwise a static offline
decision engine. Every prompt becomes a swarm task that is assigned,
executed and closed.
"""
import asyncio
import json
import uuid
from dotenv import load_dotenv

# Load .env FIRST
load_dotenv()

from autofi_agents.agents.factory import AgentFactory
from autofi_agents.config import settings
from autofi_agents.engines.decision import GeminiDecisionEngine, StaticDecisionEngine
from autofi_agents.engines.risk import SpendingLimitRiskEngine, SpendingLimits
from autofi_agents.errors import AutofiAgentsError
from autofi_agents.models.schemas import AgentType, SwarmConfig
from autofi_agents.service import SwarmService
from autofi_agents.swarm.coordinator import SwarmCoordinator
from autofi_agents.utils.logger import get_logger
from autofi_agents.utils.tracing import get_tracer

logger = get_logger(__name__)

SESSION_ID = f"session_{uuid.uuid4()}"

OFFLINE_REASONING = json.dumps({
    "steps": [
        "Review current balances and limits",
        "Draft the transactions needed for the request",
        "Submit drafts to the risk gate before execution"
    ]
})


def build_service() -> SwarmService:
    """Wire engines, factory, swarm and one agent per persona."""
    if settings.gcp_project_id:
        decision_engine = GeminiDecisionEngine()
    else:
        print("⚠️  GCP_PROJECT_ID not set - using the offline decision engine")
        decision_engine = StaticDecisionEngine(OFFLINE_REASONING)

    risk_engine = SpendingLimitRiskEngine(default_limits=SpendingLimits(per_tx_limit=10**21))
    swarm = SwarmCoordinator(SwarmConfig(id="main-swarm", name="Celo AutoFi Swarm"))
    factory = AgentFactory(
        decision_engine=decision_engine,
        risk_engine=risk_engine,
        defaults={"metadata": {"session_id": SESSION_ID}},
        swarm=swarm,
        tracer=get_tracer()
    )

    service = SwarmService(factory, swarm)
    for agent_type in AgentType:
        service.spawn(agent_type, f"{agent_type.value}-01", f"{agent_type.value.title()} Agent")
    return service


def print_help() -> None:
    print("\n📖 Commands:")
    print("  <type>: <prompt>   route a prompt (types: " + ", ".join(t.value for t in AgentType) + ")")
    print("  agents             list agents in the swarm")
    print("  tasks              list tasks and their status")
    print("  exit               quit")


async def main():
    print("=" * 70)
    print("🤖 AUTOFI AGENT SWARM")
    print("=" * 70)
    print(f"Session ID: {SESSION_ID}")

    service = build_service()
    logger.info("system_initialization_completed", session_id=SESSION_ID, agents=len(service.list_agents()))

    print_help()
    print("-" * 70)

    while True:
        try:
            user_input = input("\n💬 You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n👋 Session ended by user.")
            break

        if not user_input:
            continue

        command = user_input.lower()
        if command == "exit":
            print("\n👋 Goodbye! Session ended.")
            break
        if command == "help":
            print_help()
            continue
        if command == "agents":
            for entry in service.swarm.get_active_agents():
                print(f"  • {entry.id} ({entry.role}) - {entry.status.value}")
            continue
        if command == "tasks":
            for task in service.swarm.list_tasks():
                print(f"  • {task.id} [{task.status.value}] {task.description[:50]}")
            continue

        role, sep, prompt = user_input.partition(":")
        if not sep or not prompt.strip():
            print("  Use '<type>: <prompt>' (type 'help' for details)")
            continue

        try:
            task = service.submit_task(prompt.strip(), role=role.strip().lower())
            response = await service.run_task(task.id)
        except AutofiAgentsError as e:
            print(f"\n❌ {e}")
            continue
        except Exception as e:
            logger.error("prompt_failed", error=e, session_id=SESSION_ID)
            print(f"\n❌ Error: {type(e).__name__}: {e}")
            continue

        print(f"\n🤖 {response.agent_id} ({response.type.value})")
        if response.plan.kind == "structured":
            print(json.dumps(response.plan.data, indent=2))
        else:
            for step in response.plan.steps:
                print(f"  - {step}")
        print(f"  Risk score: {response.risk_summary.aggregate_score:.1f}")
        for recommendation in response.recommendations:
            print(f"  ⚠️  {recommendation}")


if __name__ == "__main__":
    asyncio.run(main())
