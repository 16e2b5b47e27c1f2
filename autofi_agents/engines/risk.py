"""
Risk engines - score a proposed transaction before it is executed.

Agents depend only on the ``RiskEngine`` protocol (sync or async
``validate_transaction``). ``SpendingLimitRiskEngine`` is the built-in
rule set: structural checks plus per-agent spending limits.
"""
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Deque, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from autofi_agents.models.schemas import TransactionContext, ValidationResult
from autofi_agents.utils.logger import get_logger

logger = get_logger(__name__)

# Score contributed by one finding of each level (total capped at MAX_RISK_SCORE)
LEVEL_SCORES = {"low": 5.0, "medium": 20.0, "high": 40.0, "critical": 60.0}
BLOCKING_LEVELS = ("high", "critical")
MAX_RISK_SCORE = 100.0
SPEND_WINDOW = timedelta(hours=24)


@runtime_checkable
class RiskEngine(Protocol):
    """Port used by agents to validate proposed transactions."""

    def validate_transaction(
        self,
        tx: TransactionContext
    ) -> Union[ValidationResult, Awaitable[ValidationResult]]:
        ...


@dataclass(frozen=True)
class SpendingLimits:
    """Limits in base units; None disables the check."""
    per_tx_limit: Optional[int] = None
    daily_limit: Optional[int] = None


@dataclass(frozen=True)
class Finding:
    id: str
    level: str
    message: str
    recommendation: str = ""


class SpendingLimitRiskEngine:
    """
    Rule-based risk engine.

    Rules:
    - missing_to (critical): transfers must name a recipient
    - missing_intent (medium): contract calls should name the called function
    - per_tx_limit_exceeded (high): value above the agent's per-transaction limit
    - daily_limit_exceeded (high): value plus recorded 24h spend above the daily limit

    High and critical findings make the transaction invalid; medium and low
    findings only produce warnings.

    Example:
        engine = SpendingLimitRiskEngine(default_limits=SpendingLimits(per_tx_limit=10**18))
        result = engine.validate_transaction(tx)
        if result.is_valid:
            engine.record_spend(tx.agent_id, tx.value)
    """

    def __init__(
        self,
        limits: Optional[Dict[str, SpendingLimits]] = None,
        default_limits: Optional[SpendingLimits] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._limits: Dict[str, SpendingLimits] = dict(limits or {})
        self.default_limits = default_limits or SpendingLimits()
        self._clock = clock
        self._spend: Dict[str, Deque[Tuple[datetime, int]]] = defaultdict(deque)

    def set_limits(self, agent_id: str, limits: SpendingLimits) -> None:
        self._limits[agent_id] = limits

    def limits_for(self, agent_id: str) -> SpendingLimits:
        return self._limits.get(agent_id, self.default_limits)

    def record_spend(self, agent_id: str, value: int, at: Optional[datetime] = None) -> None:
        """Record an executed spend so it counts against the daily limit."""
        self._spend[agent_id].append((at or self._clock(), value))

    def spent_last_24h(self, agent_id: str) -> int:
        cutoff = self._clock() - SPEND_WINDOW
        window = self._spend.get(agent_id)
        if window is None:
            return 0

        while window and window[0][0] < cutoff:
            window.popleft()
        if not window:
            del self._spend[agent_id]
            return 0
        return sum(value for _, value in window)

    def validate_transaction(self, tx: TransactionContext) -> ValidationResult:
        findings = self._structure_findings(tx) + self._limit_findings(tx)

        score = min(MAX_RISK_SCORE, sum(LEVEL_SCORES[f.level] for f in findings))
        blocking = [f for f in findings if f.level in BLOCKING_LEVELS]

        result = ValidationResult(
            is_valid=not blocking,
            risk_score=score,
            warnings=[f.message for f in findings if f.level not in BLOCKING_LEVELS],
            recommendations=[f.recommendation for f in blocking if f.recommendation],
            errors=[f.message for f in blocking],
        )

        logger.info(
            "transaction_validated",
            agent_id=tx.agent_id,
            tx_type=tx.type,
            is_valid=result.is_valid,
            risk_score=result.risk_score,
            findings=[f.id for f in findings]
        )
        return result

    @staticmethod
    def _structure_findings(tx: TransactionContext) -> List[Finding]:
        findings = []

        if tx.type == "transfer" and not tx.to:
            findings.append(Finding(
                "missing_to",
                "critical",
                "Transaction recipient address is missing.",
                "Provide a recipient address before submitting the transfer."
            ))

        if tx.type == "contract_call" and not tx.function_signature:
            findings.append(Finding(
                "missing_intent",
                "medium",
                "No function signature provided; unable to determine intent."
            ))

        return findings

    def _limit_findings(self, tx: TransactionContext) -> List[Finding]:
        if not tx.value:
            return []

        findings = []
        limits = self.limits_for(tx.agent_id)

        if limits.per_tx_limit is not None and tx.value > limits.per_tx_limit:
            findings.append(Finding(
                "per_tx_limit_exceeded",
                "high",
                f"Transaction value {tx.value} exceeds per-transaction limit {limits.per_tx_limit}.",
                "Split the transaction or raise the per-transaction limit."
            ))

        if limits.daily_limit is not None:
            projected = tx.value + self.spent_last_24h(tx.agent_id)
            if projected > limits.daily_limit:
                findings.append(Finding(
                    "daily_limit_exceeded",
                    "high",
                    f"Daily spending exceeded: projected {projected} vs limit {limits.daily_limit}.",
                    "Wait for the 24h window to roll over or request manual approval."
                ))

        return findings
