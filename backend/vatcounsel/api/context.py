"""HTTP API request context.

Carries the authenticated user and request tracking fields.
Only the API layer creates these via deps.get_context().
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from vatcounsel.core.logging import ContextualLogger


@dataclass
class ApiContext:
    """Full HTTP request context.

    Created by deps.get_context() and injected into endpoints via Depends().
    """

    request_id: str
    user_id: UUID
    logger: ContextualLogger

    # Email claim of the access token, absent for the local development user
    email: Optional[str] = None

    # How the user was identified: "jwt" or "local"
    auth_method: str = "jwt"

    def __str__(self) -> str:
        """Compact representation for log lines."""
        return f"ApiContext(request_id={self.request_id}, user_id={self.user_id})"
