"""Usage domain exceptions."""

from typing import Optional

from vatcounsel.core.exceptions import InvalidStateError, VatCounselException
from vatcounsel.domains.usage.types import limit_exceeded_message


class UsageLimitExceededError(InvalidStateError):
    """Raised when a user's period quota is exhausted."""

    code = "LIMIT_EXCEEDED"
    status_code = 429

    def __init__(
        self,
        used: int,
        limit: int,
        plan_key: str,
        message: Optional[str] = None,
    ) -> None:
        """Initialize with the usage figures for precise messaging."""
        if message is None:
            message = limit_exceeded_message(used, limit)
        self.used = used
        self.limit = limit
        self.plan_key = plan_key
        super().__init__(message)


class UsageError(VatCounselException):
    """Raised when the usage store fails unexpectedly. Nothing was committed."""

    code = "USAGE_ERROR"
    status_code = 500

    def __init__(self, message: str = "Failed to process usage"):
        """Initialize with default message."""
        super().__init__(message)


class EntitlementLookupError(VatCounselException):
    """Raised when a user's entitlement cannot be determined.

    Never downgraded to a default plan: guessing would over- or under-grant.
    """

    code = "ENTITLEMENT_ERROR"
    status_code = 500

    def __init__(self, message: str = "Failed to resolve entitlement"):
        """Initialize with default message."""
        super().__init__(message)
