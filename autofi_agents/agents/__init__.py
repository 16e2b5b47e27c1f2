"""
Agent layer: persona descriptors, plan parsing, the specialized agent and
the factory that builds it.
"""
from autofi_agents.agents.base_agent import SpecializedAgent
from autofi_agents.agents.factory import AgentFactory
from autofi_agents.agents.personas import Persona, builtin_personas, get_persona, resolve_agent_type
from autofi_agents.agents.planning import parse_plan

__all__ = [
    "AgentFactory",
    "Persona",
    "SpecializedAgent",
    "builtin_personas",
    "get_persona",
    "parse_plan",
    "resolve_agent_type",
]
