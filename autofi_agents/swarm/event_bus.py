"""
In-process publish/subscribe bus.

The bus is an ordinary object: whoever owns the swarm constructs it and hands
it to the components that need it. There is no process-wide instance.

Dispatch is synchronous but never recursive. A publish made while another
dispatch is running (a handler sending a message, for example) is queued and
delivered by the outermost publish once the current handler returns, so
deliveries reach each subscriber in publish order and a message storm cannot
blow the call stack. Events published from outside a dispatch are always
delivered in full; only follow-ups published by handlers count toward
``max_cascade``, and a cascade longer than that is aborted.
"""
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Tuple

from autofi_agents.config import settings
from autofi_agents.errors import DispatchLimitExceededError
from autofi_agents.utils.logger import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Any], None]


class EventBus:
    """
    Topic-based event bus with queued re-entrant dispatch.

    Example:
        bus = EventBus()
        bus.subscribe("message:defi-01", handle_message)
        bus.publish("message:defi-01", message)
    """

    def __init__(self, max_listeners: int = 50, max_cascade: Optional[int] = None):
        """
        Args:
            max_listeners: Per-topic subscriber count above which a warning is logged
            max_cascade: Max follow-up deliveries (from publishes made by handlers)
                in one drain; defaults to settings.swarm_max_cascade
        """
        self.max_listeners = max_listeners
        self.max_cascade = max_cascade or settings.swarm_max_cascade
        self._handlers: Dict[str, List[EventHandler]] = {}
        # (topic, data, published_during_dispatch)
        self._queue: Deque[Tuple[str, Any, bool]] = deque()
        self._draining = False
        self._batch_depth = 0

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        handlers = self._handlers.setdefault(topic, [])
        handlers.append(handler)

        if len(handlers) > self.max_listeners:
            logger.warning(
                "event_bus_listener_limit",
                topic=topic,
                listeners=len(handlers),
                max_listeners=self.max_listeners
            )

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        """Remove one registration of ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(topic)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[topic]

    def listener_count(self, topic: str) -> int:
        return len(self._handlers.get(topic, ()))

    def publish(self, topic: str, data: Any = None) -> None:
        """
        Deliver ``data`` to every subscriber of ``topic``.

        Delivery happens before this call returns unless a dispatch or batch is
        already in progress, in which case the event is queued behind it.

        Raises:
            DispatchLimitExceededError: If handler follow-ups exceed max_cascade
            Exception: Whatever a handler raises (pending events are discarded)
        """
        self._queue.append((topic, data, self._draining))
        if self._draining or self._batch_depth:
            return
        self._drain()

    @contextmanager
    def batch(self) -> Iterator[None]:
        """
        Queue every publish inside the block and deliver them on exit.

        Used to fan one message out to several recipients before any of their
        handlers get a chance to publish follow-ups. If the block raises
        outside a dispatch, the events it queued are discarded.
        """
        self._batch_depth += 1
        try:
            yield
        except Exception:
            if self._batch_depth == 1 and not self._draining:
                self._queue.clear()
            raise
        finally:
            self._batch_depth -= 1

        if not self._batch_depth and not self._draining:
            self._drain()

    def _drain(self) -> None:
        self._draining = True
        delivered = 0
        try:
            while self._queue:
                topic, data, follow_up = self._queue.popleft()
                # Snapshot: handlers may (un)subscribe while being called
                for handler in list(self._handlers.get(topic, ())):
                    if follow_up:
                        delivered += 1
                    if delivered > self.max_cascade:
                        logger.error(
                            "event_bus_cascade_aborted",
                            topic=topic,
                            max_cascade=self.max_cascade,
                            dropped=len(self._queue) + 1
                        )
                        raise DispatchLimitExceededError(self.max_cascade)
                    handler(data)
        except Exception:
            self._queue.clear()
            raise
        finally:
            self._draining = False
