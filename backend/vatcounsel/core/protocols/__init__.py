"""Core protocols for dependency injection.

Cross-cutting infrastructure protocols only. Domain protocols (repositories,
services) live in their respective domains/ directories.
"""

from vatcounsel.core.protocols.event_bus import DomainEvent, EventBus, EventHandler, EventSubscriber
from vatcounsel.core.protocols.payment import PaymentGatewayProtocol

__all__ = [
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "EventSubscriber",
    "PaymentGatewayProtocol",
]
