"""
Swarm coordination: event bus, agent directory, message routing and tasks.
"""
from autofi_agents.swarm.coordinator import (
    SWARM_EVENT_TOPIC,
    SwarmCoordinator,
    message_topic,
    task_topic,
)
from autofi_agents.swarm.event_bus import EventBus

__all__ = [
    "SWARM_EVENT_TOPIC",
    "EventBus",
    "SwarmCoordinator",
    "message_topic",
    "task_topic",
]
