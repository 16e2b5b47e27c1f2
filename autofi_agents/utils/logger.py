"""
Structured logging for swarm, agent and engine events.

Every entry is one JSON object per line on stdout. Components bind the ids
they log under (``swarm_id``, ``agent_id``) once and then log plain event
names with extra fields.
"""
import logging
import json
import sys
from typing import Any, Dict, Optional
from datetime import datetime

from autofi_agents.config import settings


class StructuredLogger:
    """
    JSON logger with bound context fields.

    Usage:
        logger = get_logger(__name__).bind(swarm_id="main-swarm")
        logger.info("agent_registered", agent_id="treasury-01", role="treasury")

    Output:
        {"timestamp": "2026-01-30T10:00:00", "level": "INFO", "message": "agent_registered", "swarm_id": "main-swarm", "agent_id": "treasury-01", "role": "treasury"}
    """

    def __init__(self, name: str, level: str = "INFO", context: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level))
        self.context: Dict[str, Any] = dict(context or {})

        # One stdout handler per logging.Logger, shared by bound children
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)

    def bind(self, **fields: Any) -> "StructuredLogger":
        """Return a logger that adds ``fields`` to every entry it writes."""
        return StructuredLogger(
            self.logger.name,
            logging.getLevelName(self.logger.level),
            {**self.context, **fields}
        )

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        numeric_level = getattr(logging, level)
        if not self.logger.isEnabledFor(numeric_level):
            return

        entry: Dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "message": message,
            **self.context,
            **kwargs,
        }
        self.logger.log(numeric_level, json.dumps(entry, default=str))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, error: Optional[BaseException] = None, **kwargs: Any) -> None:
        """
        Log an ERROR entry.

        When ``error`` is given its class name and text are added as
        ``error_type`` / ``error_message``, plus ``error_kind`` for package
        errors that carry a ``kind`` code.
        """
        if error is not None:
            kwargs["error_type"] = type(error).__name__
            kwargs["error_message"] = str(error)
            kind = getattr(error, "kind", None)
            if kind:
                kwargs["error_kind"] = kind

        self._log("ERROR", message, **kwargs)


_loggers: Dict[str, StructuredLogger] = {}


def get_logger(name: str, level: Optional[str] = None) -> StructuredLogger:
    """
    Get or create the module-level logger for ``name``.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Log level; defaults to settings.log_level
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, level or settings.log_level)

    return _loggers[name]
