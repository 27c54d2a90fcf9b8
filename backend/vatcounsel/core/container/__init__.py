"""Dependency Injection Container Module.

Usage:
------
    # Initialize at startup (call once from main.py)
    from vatcounsel.core.container import initialize_container
    from vatcounsel.core.config import settings
    initialize_container(settings)

    # In FastAPI deps.py
    def get_container() -> Container:
        return container

    # In tests (construct directly with fakes, don't use global)
    from vatcounsel.core.container import Container
    test_container = Container(event_bus=FakeEventBus(), ...)

Module structure:
-----------------
    container/
    ├── __init__.py      # This file - exports public API
    ├── container.py     # Container dataclass (serves)
    └── factory.py       # create_container() (builds)
"""

from typing import TYPE_CHECKING

from vatcounsel.core.container.container import Container
from vatcounsel.core.container.factory import create_container

if TYPE_CHECKING:
    from vatcounsel.core.config import Settings

__all__ = [
    "Container",
    "create_container",
    "container",
    "initialize_container",
    "reset_container",
]


container: Container | None = None
"""Global container instance, initialized via `initialize_container()` at startup.

Do NOT import this in domain code. Domains receive dependencies
via constructor parameters, never by importing the container directly.
"""


def initialize_container(settings: "Settings") -> None:
    """Initialize the global container. Call once at startup.

    Raises:
        RuntimeError: If called more than once (container already initialized)
    """
    global container

    if container is not None:
        raise RuntimeError(
            "Container already initialized. "
            "initialize_container() should only be called once at startup."
        )

    container = create_container(settings)


def reset_container() -> None:
    """Reset the global container to None. For testing only."""
    global container
    container = None
