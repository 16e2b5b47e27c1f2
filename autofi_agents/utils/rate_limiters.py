"""
Concurrency limits for outbound decision-engine calls.

Every GeminiDecisionEngine in the process shares one semaphore sized by
``settings.llm_rate_limit``, so a swarm of agents running tasks at once
cannot saturate the model endpoint.
"""
import asyncio
from typing import Optional

from autofi_agents.config import settings
from autofi_agents.utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiters:
    """
    Process-wide semaphores for external services.

    Example:
        async with RateLimiters.llm:
            response = await model.generate_content_async(prompt)
    """

    _llm_semaphore: Optional[asyncio.Semaphore] = None
    _initialized = False

    @classmethod
    def initialize(cls) -> None:
        if cls._initialized:
            return

        cls._llm_semaphore = asyncio.Semaphore(settings.llm_rate_limit)
        logger.debug("rate_limiters_initialized", llm_limit=settings.llm_rate_limit)
        cls._initialized = True


RateLimiters.initialize()
RateLimiters.llm = RateLimiters._llm_semaphore
