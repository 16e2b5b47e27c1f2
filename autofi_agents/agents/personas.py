"""
Persona descriptors for the five agent types.

A persona is data, not a subclass: a preamble describing the domain mandate
plus the default objectives used when the caller does not provide any. The
built-in table lives in ``templates/personas.yaml``.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Tuple, Union

from autofi_agents.errors import UnknownAgentTypeError
from autofi_agents.models.schemas import AgentTemplate, AgentType
from autofi_agents.utils.prompts import load_personas


@dataclass(frozen=True)
class Persona:
    agent_type: AgentType
    name: str
    description: str
    prompt_preamble: str
    objectives: Tuple[str, ...]

    def as_template(self) -> AgentTemplate:
        return AgentTemplate(prompt_preamble=self.prompt_preamble, objectives=list(self.objectives))


def resolve_agent_type(value: Union[str, AgentType]) -> AgentType:
    """
    Normalize a type name to ``AgentType``.

    Raises:
        UnknownAgentTypeError: If the value is not one of the five personas
    """
    if isinstance(value, AgentType):
        return value
    try:
        return AgentType(str(value).lower())
    except ValueError:
        raise UnknownAgentTypeError(value) from None


@lru_cache(maxsize=1)
def builtin_personas() -> Dict[AgentType, Persona]:
    """Load every built-in persona; each agent type must be defined."""
    raw: Dict[str, Dict[str, Any]] = load_personas()
    personas = {}

    for agent_type in AgentType:
        entry = raw.get(agent_type.value)
        if not entry:
            raise ValueError(f"Persona '{agent_type.value}' missing from templates/personas.yaml")

        objectives: List[str] = entry.get("objectives") or []
        personas[agent_type] = Persona(
            agent_type=agent_type,
            name=entry.get("name", agent_type.value.title()),
            description=entry.get("description", ""),
            prompt_preamble=entry["prompt_preamble"],
            objectives=tuple(objectives),
        )

    return personas


def get_persona(agent_type: Union[str, AgentType]) -> Persona:
    return builtin_personas()[resolve_agent_type(agent_type)]
