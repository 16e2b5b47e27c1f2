"""
Optional Langfuse tracing.

Tracing is enabled only when both Langfuse keys are configured; otherwise
agents run untraced and ``get_tracer`` returns None.
"""
from contextlib import nullcontext
from typing import Any, ContextManager, Optional

from langfuse import Langfuse

from autofi_agents.config import settings
from autofi_agents.utils.logger import get_logger

logger = get_logger(__name__)


def get_tracer() -> Optional[Langfuse]:
    """Build a Langfuse client from settings, or None if keys are missing."""
    if not (settings.langfuse_public_key and settings.langfuse_secret_key):
        logger.debug("tracing_disabled", reason="langfuse_keys_missing")
        return None

    return Langfuse(
        public_key=settings.langfuse_public_key,
        secret_key=settings.langfuse_secret_key,
        host=settings.langfuse_host,
    )


def span(tracer: Optional[Langfuse], name: str) -> ContextManager[Any]:
    """Open a Langfuse span, or a no-op context when tracing is off."""
    if tracer is None:
        return nullcontext()
    return tracer.start_as_current_span(name=name)
