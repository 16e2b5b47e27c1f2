"""
Decision engines - turn a prompt (plus context) into a reasoning string.

Agents depend only on the ``DecisionEngine`` protocol; any object with a
``decide(prompt, context)`` method works, sync or async. Two implementations
ship with the package:

- GeminiDecisionEngine: Vertex AI Gemini with timeout, rate limiting and retries
- StaticDecisionEngine: returns a fixed answer (offline runs, demos, tests)
"""
import asyncio
import logging
from typing import Any, Awaitable, Dict, Optional, Protocol, Union, runtime_checkable

import vertexai
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)
from vertexai.generative_models import GenerativeModel

from autofi_agents.config import settings
from autofi_agents.utils.logger import get_logger
from autofi_agents.utils.rate_limiters import RateLimiters

logger = get_logger(__name__)


@runtime_checkable
class DecisionEngine(Protocol):
    """Port used by agents to obtain reasoning for a prompt."""

    def decide(
        self,
        prompt: str,
        context: Optional[Dict[str, Any]] = None
    ) -> Union[str, Awaitable[str]]:
        ...


class StaticDecisionEngine:
    """
    Decision engine that always returns the same reasoning.

    Example:
        engine = StaticDecisionEngine('{"steps": []}')
        await engine.decide("Rebalance the treasury")  # '{"steps": []}'
    """

    def __init__(self, reasoning: str = '{"steps": []}'):
        self.reasoning = reasoning
        self.calls = 0

    async def decide(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> str:
        self.calls += 1
        logger.debug("static_decision", prompt_length=len(prompt), call=self.calls)
        return self.reasoning


class GeminiDecisionEngine:
    """
    Decision engine backed by a Vertex AI Gemini model.

    Provides production-ready resilience:
    - Timeout: Prevents hanging on slow API responses
    - Rate limiting: Controls concurrent LLM calls via shared semaphore
    - Retries: Automatic exponential backoff on transient failures

    Example:
        engine = GeminiDecisionEngine()
        reasoning = await engine.decide("Propose a cUSD rebalance", {"balance": "1200"})
    """

    def __init__(self, model: Optional[Any] = None, model_name: Optional[str] = None):
        """
        Args:
            model: Pre-built GenerativeModel (or any object exposing
                ``generate_content_async``); built from settings when omitted
            model_name: Gemini model name, defaults to settings.agent_model
        """
        self.model_name = model_name or settings.agent_model

        if model is None:
            if settings.gcp_project_id:
                vertexai.init(project=settings.gcp_project_id, location=settings.gcp_location)
            model = GenerativeModel(self.model_name)

        self.model = model

        logger.info(
            "decision_engine_initialized",
            engine="gemini",
            model=self.model_name,
            llm_timeout=settings.llm_timeout,
            llm_max_retries=settings.llm_max_retries,
            llm_rate_limit=settings.llm_rate_limit
        )

    @retry(
        stop=stop_after_attempt(settings.llm_max_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((asyncio.TimeoutError, ConnectionError)),
        before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
        reraise=True
    )
    async def decide(self, prompt: str, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Ask the model for reasoning on ``prompt``.

        ``context`` is already serialized into the prompt by the agent; it is
        only used here for logging.

        Raises:
            asyncio.TimeoutError: If the call exceeds settings.llm_timeout (after retries)
            ConnectionError: If the network fails (after retries)
        """
        async with RateLimiters.llm:
            logger.info(
                "llm_call_started",
                model=self.model_name,
                timeout=settings.llm_timeout,
                prompt_length=len(prompt),
                context_keys=sorted(context.keys()) if context else [],
                rate_limiter="llm_semaphore"
            )

            try:
                response = await asyncio.wait_for(
                    self.model.generate_content_async(prompt),
                    timeout=settings.llm_timeout
                )
            except asyncio.TimeoutError:
                logger.error(
                    "llm_call_timeout",
                    model=self.model_name,
                    timeout_seconds=settings.llm_timeout
                )
                raise
            except ConnectionError as e:
                logger.error(
                    "llm_call_connection_error",
                    model=self.model_name,
                    error=str(e),
                    error_type="network_error"
                )
                raise

            text = getattr(response, "text", "") or ""
            usage = getattr(response, "usage_metadata", None)
            logger.info(
                "llm_call_completed",
                model=self.model_name,
                tokens_used=getattr(usage, "total_token_count", 0),
                response_length=len(text)
            )
            return text

