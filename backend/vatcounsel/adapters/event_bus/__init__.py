"""Event bus adapters."""

from vatcounsel.adapters.event_bus.in_memory import InMemoryEventBus

__all__ = ["InMemoryEventBus"]
