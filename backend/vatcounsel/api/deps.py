"""Dependencies that are used in the API endpoints."""

import uuid
from typing import Any, Optional, get_type_hints
from uuid import UUID

import jwt
from fastapi import Depends, Header, Request

from vatcounsel.api.context import ApiContext
from vatcounsel.core import container as container_mod
from vatcounsel.core.config import settings
from vatcounsel.core.container import Container
from vatcounsel.core.exceptions import UnauthorizedError
from vatcounsel.core.logging import logger
from vatcounsel.db.session import get_db

__all__ = ["get_container", "get_context", "get_db", "Inject"]

SESSION_COOKIE_NAME = "sb-access-token"


def _extract_token(authorization: Optional[str], request: Request) -> Optional[str]:
    """Bearer header first, then the session cookie set by the frontend."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


def _decode_access_token(token: str) -> dict[str, Any]:
    """Verify a Supabase-issued access token and return its claims.

    Raises:
    ------
        UnauthorizedError: If the token is malformed, expired or not signed by us.
    """
    if not settings.SUPABASE_JWT_SECRET:
        logger.error("SUPABASE_JWT_SECRET is not configured, rejecting token")
        raise UnauthorizedError()
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Session expired") from e
    except jwt.PyJWTError as e:
        logger.debug(f"Access token rejected: {e}")
        raise UnauthorizedError() from e


def _user_from_claims(claims: dict[str, Any]) -> tuple[UUID, Optional[str]]:
    try:
        user_id = UUID(str(claims["sub"]))
    except (KeyError, ValueError) as e:
        raise UnauthorizedError("Access token has no valid subject") from e
    return user_id, claims.get("email")


def _local_user() -> tuple[UUID, Optional[str]]:
    if not settings.LOCAL_USER_ID:
        raise UnauthorizedError("AUTH_ENABLED is false but LOCAL_USER_ID is not set")
    try:
        return UUID(settings.LOCAL_USER_ID), None
    except ValueError as e:
        raise UnauthorizedError("LOCAL_USER_ID is not a valid UUID") from e


async def get_context(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> ApiContext:
    """Create the API context for the request.

    This is the primary dependency for all user-facing endpoints, providing:
    - Request tracking (request_id)
    - The authenticated user
    - Pre-configured contextual logger

    Args:
    ----
        request (Request): The FastAPI request object.
        authorization (Optional[str]): The Authorization header.

    Returns:
    -------
        ApiContext: API context with the user and a request logger.

    Raises:
    ------
        UnauthorizedError: If no valid session is provided.
    """
    # Get request ID from middleware
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    if not settings.AUTH_ENABLED:
        user_id, email = _local_user()
        auth_method = "local"
    else:
        token = _extract_token(authorization, request)
        if not token:
            raise UnauthorizedError()
        user_id, email = _user_from_claims(_decode_access_token(token))
        auth_method = "jwt"

    ctx = ApiContext(
        request_id=request_id,
        user_id=user_id,
        email=email,
        auth_method=auth_method,
        logger=logger.with_context(
            request_id=request_id,
            user_id=str(user_id),
            auth_method=auth_method,
            context_base="api",
        ),
    )

    # Store context in request state for middleware access
    request.state.api_context = ctx
    return ctx


# ---------------------------------------------------------------------------
# DI Container
# ---------------------------------------------------------------------------


def get_container() -> Container:
    """Get the DI container. Initialized at startup."""
    c = container_mod.container
    if c is None:
        raise RuntimeError("Container not initialized. Call initialize_container() first.")
    return c


# ---------------------------------------------------------------------------
# Protocol Injection
# ---------------------------------------------------------------------------

# Cache of protocol_type → Container field name, built once at first call.
_INJECT_CACHE: dict[type, str] = {}


def _resolve_field_name(protocol_type: type) -> str:
    """Find which Container field matches the given protocol type.

    Uses get_type_hints() to introspect the Container dataclass.
    Result is cached so the lookup happens at most once per protocol type.
    """
    if not _INJECT_CACHE:
        for name, hint in get_type_hints(Container).items():
            _INJECT_CACHE[hint] = name

    field_name = _INJECT_CACHE.get(protocol_type)
    if field_name is None:
        available = list(_INJECT_CACHE.values())
        raise TypeError(
            f"No binding for {protocol_type.__name__} in Container. Available fields: {available}"
        )
    return field_name


def Inject(protocol_type: type):  # noqa: N802 - uppercase to match FastAPI convention
    """Resolve a protocol implementation from the DI container.

    Works like ``Depends()`` but looks up the implementation by protocol type
    instead of requiring the caller to know about the Container internals.

    Usage in FastAPI endpoints::

        from vatcounsel.api.deps import Inject
        from vatcounsel.domains.usage.protocols import UsageServiceProtocol


        @router.get("/me")
        async def get_usage(
            usage_service: UsageServiceProtocol = Inject(UsageServiceProtocol),
        ):
            ...
    """
    field_name = _resolve_field_name(protocol_type)

    def _resolve(c: Container = Depends(get_container)):
        return getattr(c, field_name)

    return Depends(_resolve)
