"""
Specialized agent - one capability, five personas.

Every agent type shares this class; only the persona (preamble + objectives)
differs. An agent builds a full prompt, asks its decision engine for
reasoning, turns the reasoning into a plan and scores the transactions it
proposes with the risk engine.
"""
import inspect
import json
import time
from datetime import datetime
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from langfuse import Langfuse

from autofi_agents.agents.personas import Persona, get_persona
from autofi_agents.agents.planning import parse_plan
from autofi_agents.engines.decision import DecisionEngine
from autofi_agents.engines.risk import RiskEngine
from autofi_agents.models.protocols import BROADCAST, AgentMessage, BroadcastScope, MessageType
from autofi_agents.models.schemas import (
    AgentResponse,
    AgentType,
    ProcessPromptOptions,
    RiskSummary,
    SpecializedAgentConfig,
    SwarmTask,
    TransactionContext,
    ValidationResult,
)
from autofi_agents.swarm.coordinator import SwarmCoordinator, message_topic, task_topic
from autofi_agents.utils.logger import get_logger
from autofi_agents.utils.prompts import get_prompt
from autofi_agents.utils.tracing import span

T = TypeVar("T")


async def _resolve(value: Union[T, Awaitable[T]]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


class SpecializedAgent:
    """
    Persona-parameterized agent.

    Provides common functionality:
    - Prompt assembly (preamble, context, numbered objectives)
    - Decision engine invocation and plan parsing
    - Risk aggregation over proposed transactions
    - Optional swarm membership (messages, broadcasts, task notifications)
    - Optional Langfuse tracing

    Decision and risk engine failures propagate to the caller unchanged;
    this class performs no retries.

    Example:
        config = SpecializedAgentConfig(id="treasury-01", type="treasury", name="Treasury")
        agent = SpecializedAgent(config, decision_engine=engine, risk_engine=risk)
        response = await agent.process_prompt(
            "Rebalance to 50/50 CELO/cUSD",
            ProcessPromptOptions(proposed_transactions=[tx])
        )
    """

    def __init__(
        self,
        config: SpecializedAgentConfig,
        decision_engine: DecisionEngine,
        risk_engine: RiskEngine,
        swarm: Optional[SwarmCoordinator] = None,
        tracer: Optional[Langfuse] = None
    ):
        """
        Initialize the agent.

        Unset objectives and preamble are filled from the persona of
        ``config.type``. When a swarm is given the agent registers under its
        type as role and subscribes to its message and task topics.

        Raises:
            AlreadyRegisteredError / CapacityExceededError: From swarm registration
        """
        self.persona: Persona = get_persona(config.type)
        self._config = config.model_copy(deep=True, update={
            "objectives": list(config.objectives) if config.objectives is not None else list(self.persona.objectives),
            "prompt_preamble": config.prompt_preamble if config.prompt_preamble is not None else self.persona.prompt_preamble,
        })
        self.decision_engine = decision_engine
        self.risk_engine = risk_engine
        self.tracer = tracer
        self.swarm: Optional[SwarmCoordinator] = None
        self.logger = get_logger(f"agent.{config.type.value}").bind(agent_id=config.id)

        if swarm is not None:
            self.join_swarm(swarm)

        self.logger.info(
            "agent_initialized",
            agent_type=self.type.value,
            objectives=len(self._config.objectives),
            swarm=swarm.config.id if swarm else None
        )

    @property
    def id(self) -> str:
        return self._config.id

    @property
    def type(self) -> AgentType:
        return self._config.type

    def get_config(self) -> SpecializedAgentConfig:
        """Return a deep copy; the agent's own configuration never changes."""
        return self._config.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Prompt processing
    # ------------------------------------------------------------------

    async def process_prompt(
        self,
        prompt: str,
        options: Optional[ProcessPromptOptions] = None
    ) -> AgentResponse:
        """
        Reason about ``prompt`` and score the proposed transactions.

        Flow:
        1. Build the full prompt (preamble, context, objectives)
        2. Ask the decision engine for reasoning
        3. Parse the reasoning into a structured or raw plan
        4. Validate each proposed transaction and aggregate the risk

        Args:
            prompt: User intent
            options: Optional context and proposed transactions

        Returns:
            AgentResponse with plan, risk summary and deduplicated recommendations
        """
        options = options or ProcessPromptOptions()
        start_time = time.time()

        with span(self.tracer, f"{self.id}_process_prompt"):
            if self.tracer is not None:
                self.tracer.update_current_trace(
                    input={"prompt": prompt, "context": options.context},
                    tags=[self.type.value, self.id]
                )

            full_prompt = self.build_prompt(prompt, options.context)
            reasoning = await _resolve(self.decision_engine.decide(full_prompt, options.context))

            plan = parse_plan(reasoning)
            risk_summary, recommendations = await self.assess_risk(options.proposed_transactions)

            latency_ms = int((time.time() - start_time) * 1000)
            response = AgentResponse(
                agent_id=self.id,
                type=self.type,
                reasoning=reasoning,
                plan=plan,
                risk_summary=risk_summary,
                recommendations=recommendations,
                telemetry={
                    "timestamp": datetime.now().isoformat(),
                    "latency_ms": latency_ms,
                    "plan_kind": plan.kind,
                    "transactions_evaluated": len(risk_summary.evaluations),
                }
            )

            if self.tracer is not None:
                self.tracer.update_current_trace(output=response.model_dump(mode="json"))

        self.logger.info(
            "prompt_processed",
            plan_kind=plan.kind,
            aggregate_score=risk_summary.aggregate_score,
            recommendations=len(recommendations),
            latency_ms=latency_ms
        )
        return response

    def build_prompt(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> str:
        sections = []
        if self._config.prompt_preamble:
            sections.append(self._config.prompt_preamble)
        sections.append(prompt)

        if context is not None:
            sections.append(get_prompt(
                "context_section",
                context=json.dumps(context, indent=2, default=str)
            ))

        if self._config.objectives:
            numbered = "\n".join(
                f"{i}. {objective}" for i, objective in enumerate(self._config.objectives, 1)
            )
            sections.append(get_prompt("objectives_section", objectives=numbered))

        return "\n\n".join(sections)

    async def assess_risk(
        self,
        transactions: Sequence[TransactionContext]
    ) -> Tuple[RiskSummary, List[str]]:
        """
        Validate each transaction and aggregate the verdicts.

        Recommendations of invalid transactions and warnings of every
        transaction are pooled, then deduplicated in first-seen order. The
        aggregate score is the mean risk score, or 0 with no transactions.
        """
        evaluations: List[ValidationResult] = []
        pool: List[str] = []

        for tx in transactions:
            result = await _resolve(self.risk_engine.validate_transaction(tx))
            evaluations.append(result)

            if not result.is_valid:
                pool.extend(result.recommendations)
            if result.warnings:
                pool.extend(result.warnings)

        aggregate = sum(e.risk_score for e in evaluations) / len(evaluations) if evaluations else 0.0
        return (
            RiskSummary(aggregate_score=aggregate, evaluations=evaluations),
            list(dict.fromkeys(pool)),
        )

    # ------------------------------------------------------------------
    # Swarm membership
    # ------------------------------------------------------------------

    def join_swarm(self, swarm: SwarmCoordinator) -> None:
        swarm.register_agent(self.id, self.type.value)
        swarm.subscribe(message_topic(self.id), self.on_message)
        swarm.subscribe(task_topic(self.id), self.on_task)
        self.swarm = swarm

    def leave_swarm(self) -> None:
        if self.swarm is None:
            return
        self.swarm.unsubscribe(message_topic(self.id), self.on_message)
        self.swarm.unsubscribe(task_topic(self.id), self.on_task)
        self.swarm.unregister_agent(self.id)
        self.swarm = None

    def on_message(self, message: AgentMessage) -> None:
        """Called for every message delivered to this agent. Override to react."""
        self.logger.info(
            "message_received",
            sender=message.sender,
            message_type=message.type.value,
            content=message.content
        )

    def on_task(self, task: SwarmTask) -> None:
        """Called when the swarm assigns a task to this agent. Override to react."""
        self.logger.info(
            "task_received",
            task_id=task.id,
            priority=task.priority.value
        )

    def send_message_to_swarm(
        self,
        to: str,
        content: Any,
        type: MessageType = MessageType.PROPOSAL,
        correlation_id: Optional[str] = None
    ) -> Optional[AgentMessage]:
        """Send a direct message; returns None when the agent has no swarm."""
        if self.swarm is None:
            return None

        message = AgentMessage(
            sender=self.id,
            to=to,
            scope=BroadcastScope.DIRECT,
            type=type,
            content=content,
            correlation_id=correlation_id
        )
        self.swarm.send_message(message)
        return message

    def broadcast_to_swarm(
        self,
        content: Any,
        role: Optional[str] = None,
        type: MessageType = MessageType.ALERT
    ) -> Optional[AgentMessage]:
        """Broadcast to every agent, or only to agents of ``role``."""
        if self.swarm is None:
            return None

        message = AgentMessage(
            sender=self.id,
            to=BROADCAST,
            scope=BroadcastScope.ROLE if role else BroadcastScope.GLOBAL,
            role=role,
            type=type,
            content=content
        )
        self.swarm.send_message(message)
        return message
