"""
Best-effort extraction of a structured plan from free-form reasoning.

Two stages:
1. A fenced code block (```json ... ``` preferred, then a bare ``` ... ```)
   is parsed as JSON. If a fence exists its contents decide the outcome.
2. Without a fence the whole reasoning string is parsed as JSON.

Anything that does not parse becomes a ``RawPlan`` holding the original text
and its non-empty lines. ``parse_plan`` never raises.
"""
import json
import re
from typing import Optional

from autofi_agents.models.schemas import Plan, RawPlan, StructuredPlan

JSON_FENCE = re.compile(r"```json\s*(.*?)```", re.DOTALL | re.IGNORECASE)
GENERIC_FENCE = re.compile(r"```[ \t]*\r?\n(.*?)```", re.DOTALL)


def extract_fenced_block(reasoning: str) -> Optional[str]:
    match = JSON_FENCE.search(reasoning) or GENERIC_FENCE.search(reasoning)
    return match.group(1) if match else None


def parse_plan(reasoning: str) -> Plan:
    """
    Turn reasoning text into a plan.

    Example:
        >>> parse_plan('Plan:\\n```json\\n{"a": 1}\\n```').data
        {'a': 1}
        >>> parse_plan("Check balances\\n\\nSwap cUSD").steps
        ['Check balances', 'Swap cUSD']
    """
    fenced = extract_fenced_block(reasoning)
    candidate = fenced if fenced is not None else reasoning

    try:
        return StructuredPlan(data=json.loads(candidate))
    except (ValueError, TypeError, RecursionError):
        return raw_plan(reasoning)


def raw_plan(reasoning: str) -> RawPlan:
    steps = [line.strip() for line in reasoning.splitlines() if line.strip()]
    return RawPlan(reasoning=reasoning, steps=steps)
