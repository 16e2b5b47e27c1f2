"""
Agent factory - the single construction entry point for agents.

The factory merges the built-in persona templates with caller overrides once,
at construction, and then layers call-site values over factory defaults over
the template for every agent it creates.
"""
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from langfuse import Langfuse

from autofi_agents.agents.base_agent import SpecializedAgent
from autofi_agents.agents.personas import builtin_personas, resolve_agent_type
from autofi_agents.engines.decision import DecisionEngine
from autofi_agents.engines.risk import RiskEngine
from autofi_agents.models.schemas import (
    AgentDefaults,
    AgentOverrides,
    AgentTemplate,
    AgentTemplateOverride,
    AgentType,
    SpecializedAgentConfig,
)
from autofi_agents.swarm.coordinator import SwarmCoordinator
from autofi_agents.utils.logger import get_logger

logger = get_logger(__name__)

TemplateOverrides = Mapping[Union[str, AgentType], Union[AgentTemplateOverride, Dict[str, Any]]]


class AgentFactory:
    """
    Builds configured agents from persona templates plus overrides.

    Field priority when creating an agent:
    1. Values given to ``create``
    2. Factory ``defaults`` (description, objectives, metadata)
    3. The (possibly overridden) persona template (preamble, objectives)

    Example:
        factory = AgentFactory(
            decision_engine=GeminiDecisionEngine(),
            risk_engine=SpendingLimitRiskEngine(),
            templates={"treasury": {"objectives": ["Keep 30% in cUSD"]}}
        )
        agent = factory.create("treasury", {"id": "treasury-01", "name": "Main Treasury"})
    """

    def __init__(
        self,
        decision_engine: DecisionEngine,
        risk_engine: RiskEngine,
        defaults: Optional[Union[AgentDefaults, Dict[str, Any]]] = None,
        templates: Optional[TemplateOverrides] = None,
        swarm: Optional[SwarmCoordinator] = None,
        tracer: Optional[Langfuse] = None
    ):
        """
        Args:
            decision_engine: Shared by every agent the factory creates
            risk_engine: Shared by every agent the factory creates
            defaults: Factory-level description/objectives/metadata
            templates: Per-type preamble/objectives overrides
            swarm: Swarm new agents join by default
            tracer: Langfuse client handed to every agent

        Raises:
            UnknownAgentTypeError: If templates names an unknown agent type
        """
        self.decision_engine = decision_engine
        self.risk_engine = risk_engine
        self.defaults = AgentDefaults.model_validate(defaults or {})
        self.swarm = swarm
        self.tracer = tracer
        self._templates = self._merge_templates(templates or {})

        logger.info(
            "agent_factory_initialized",
            overridden_types=sorted(resolve_agent_type(t).value for t in (templates or {})),
            has_defaults=defaults is not None,
            swarm=swarm.config.id if swarm else None
        )

    @staticmethod
    def _merge_templates(overrides: TemplateOverrides) -> Dict[AgentType, AgentTemplate]:
        """Override preamble/objectives only where given; keep built-ins otherwise."""
        merged = {agent_type: persona.as_template() for agent_type, persona in builtin_personas().items()}

        for key, raw in overrides.items():
            agent_type = resolve_agent_type(key)
            override = AgentTemplateOverride.model_validate(raw or {})
            base = merged[agent_type]
            merged[agent_type] = AgentTemplate(
                prompt_preamble=override.prompt_preamble if override.prompt_preamble is not None else base.prompt_preamble,
                objectives=override.objectives if override.objectives is not None else base.objectives,
            )

        return merged

    def get_template(self, agent_type: Union[str, AgentType]) -> AgentTemplate:
        return self._templates[resolve_agent_type(agent_type)]

    def build_config(
        self,
        agent_type: Union[str, AgentType],
        config: Union[AgentOverrides, Dict[str, Any]]
    ) -> SpecializedAgentConfig:
        """Layer call-site values, factory defaults and the template into a config."""
        resolved_type = resolve_agent_type(agent_type)
        template = self._templates[resolved_type]
        overrides = AgentOverrides.model_validate(config)

        objectives = overrides.objectives
        if objectives is None:
            objectives = self.defaults.objectives
        if objectives is None:
            objectives = template.objectives

        return SpecializedAgentConfig(
            id=overrides.id,
            type=resolved_type,
            name=overrides.name,
            description=overrides.description if overrides.description is not None else self.defaults.description,
            objectives=list(objectives),
            prompt_preamble=overrides.prompt_preamble if overrides.prompt_preamble is not None else template.prompt_preamble,
            metadata={
                **self.defaults.metadata,
                **overrides.metadata,
                "created_at": datetime.now().isoformat(),
            },
        )

    def create(
        self,
        agent_type: Union[str, AgentType],
        config: Union[AgentOverrides, Dict[str, Any]],
        swarm: Optional[SwarmCoordinator] = None
    ) -> SpecializedAgent:
        """
        Create a ready-to-use agent.

        Args:
            agent_type: One of treasury, defi, nft, governance, donation
            config: At least ``id`` and ``name``; optional description,
                objectives, prompt_preamble and metadata
            swarm: Swarm to join (defaults to the factory's swarm)

        Raises:
            UnknownAgentTypeError: For any type outside the five personas
        """
        full_config = self.build_config(agent_type, config)
        agent = SpecializedAgent(
            full_config,
            decision_engine=self.decision_engine,
            risk_engine=self.risk_engine,
            swarm=swarm or self.swarm,
            tracer=self.tracer
        )

        logger.info(
            "agent_created",
            agent_id=full_config.id,
            agent_type=full_config.type.value,
            name=full_config.name
        )
        return agent
