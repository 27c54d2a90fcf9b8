"""Shared exceptions module.

Every exception that can reach the HTTP layer carries a machine-readable
``code`` and the ``status_code`` it is rendered with by the exception handlers
in ``vatcounsel.api.middleware``.
"""

from typing import Optional

from pydantic import ValidationError


class VatCounselException(Exception):
    """Base exception for VAT Counsel services."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: Optional[str] = "Internal server error"):
        """Create a new VatCounselException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class UnauthorizedError(VatCounselException):
    """Raised when a request carries no valid user session."""

    code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: Optional[str] = "Authentication required"):
        """Create a new UnauthorizedError instance."""
        super().__init__(message)


class NotFoundException(VatCounselException):
    """Exception raised when an object is not found."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new NotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class InvalidStateError(VatCounselException):
    """Exception raised when an object is in an invalid state.

    Used when multiple services are involved and the state of one service is invalid,
    in relation to the other services.
    """

    code = "INVALID_STATE"
    status_code = 400

    def __init__(self, message: Optional[str] = "Object is in an invalid state"):
        """Create a new InvalidStateError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class ExternalServiceError(VatCounselException):
    """Exception raised when an external service fails."""

    code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502

    def __init__(self, service_name: str, message: Optional[str] = "External service failed"):
        """Create a new ExternalServiceError instance.

        Args:
        ----
            service_name (str): The name of the external service.
            message (str, optional): The error message. Has default message.

        """
        self.service_name = service_name
        super().__init__(message)

    def __str__(self) -> str:
        """Prefix the message with the failing service."""
        return f"{self.service_name}: {self.message}"


def unpack_validation_error(exc: ValidationError) -> dict:
    """Unpack a Pydantic validation error into a dictionary.

    Args:
    ----
        exc (ValidationError): The Pydantic validation error.

    Returns:
    -------
        dict: The dictionary representation of the validation error.

    """
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        message = error["msg"]
        error_messages.append({field: message})

    return {"errors": error_messages}
