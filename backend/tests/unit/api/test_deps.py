"""Unit tests for request authentication and protocol injection in api.deps."""

import time
from uuid import uuid4

import jwt
import pytest
from starlette.requests import Request

from vatcounsel.api import deps
from vatcounsel.core import container as container_mod
from vatcounsel.core.config import settings
from vatcounsel.core.exceptions import UnauthorizedError
from vatcounsel.domains.billing.protocols import BillingServiceProtocol
from vatcounsel.domains.usage.protocols import UsageMeterProtocol, UsageServiceProtocol

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


def _request(headers=None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


def _token(sub=None, secret=SECRET, audience="authenticated", expires_in=3600, **claims):
    payload = {
        "sub": str(sub or uuid4()),
        "aud": audience,
        "exp": int(time.time()) + expires_in,
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def auth_enabled(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_ENABLED", True)
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", SECRET)


# ---------------------------------------------------------------------------
# get_context
# ---------------------------------------------------------------------------


class TestGetContextWithAuth:
    @pytest.mark.asyncio
    async def test_bearer_token(self, auth_enabled):
        user_id = uuid4()
        request = _request()
        request.state.request_id = "req-1"

        ctx = await deps.get_context(
            request, authorization=f"Bearer {_token(user_id, email='a@b.bg')}"
        )

        assert ctx.user_id == user_id
        assert ctx.email == "a@b.bg"
        assert ctx.request_id == "req-1"
        assert ctx.auth_method == "jwt"
        assert ctx.logger.dimensions["user_id"] == str(user_id)
        assert request.state.api_context is ctx

    @pytest.mark.asyncio
    async def test_session_cookie(self, auth_enabled):
        user_id = uuid4()
        request = _request({"Cookie": f"{deps.SESSION_COOKIE_NAME}={_token(user_id)}"})

        ctx = await deps.get_context(request, authorization=None)

        assert ctx.user_id == user_id
        assert ctx.email is None

    @pytest.mark.asyncio
    async def test_missing_token(self, auth_enabled):
        with pytest.raises(UnauthorizedError):
            await deps.get_context(_request(), authorization=None)

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_ignored(self, auth_enabled):
        with pytest.raises(UnauthorizedError):
            await deps.get_context(_request(), authorization=f"Basic {_token()}")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "token",
        [
            _token(secret="some-other-secret-that-is-long-enough"),
            _token(audience="anon"),
            "not-a-jwt",
            _token(sub="not-a-uuid"),
        ],
    )
    async def test_rejected_tokens(self, auth_enabled, token):
        with pytest.raises(UnauthorizedError) as exc_info:
            await deps.get_context(_request(), authorization=f"Bearer {token}")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token(self, auth_enabled):
        with pytest.raises(UnauthorizedError) as exc_info:
            await deps.get_context(
                _request(), authorization=f"Bearer {_token(expires_in=-60)}"
            )
        assert exc_info.value.message == "Session expired"

    @pytest.mark.asyncio
    async def test_unconfigured_secret_rejects(self, auth_enabled, monkeypatch):
        monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "")
        with pytest.raises(UnauthorizedError):
            await deps.get_context(_request(), authorization=f"Bearer {_token()}")


class TestGetContextLocal:
    @pytest.mark.asyncio
    async def test_local_user(self, monkeypatch):
        local_id = uuid4()
        monkeypatch.setattr(settings, "AUTH_ENABLED", False)
        monkeypatch.setattr(settings, "LOCAL_USER_ID", str(local_id))

        ctx = await deps.get_context(_request(), authorization=None)

        assert ctx.user_id == local_id
        assert ctx.auth_method == "local"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("local_user_id", [None, "nope"])
    async def test_misconfigured_local_user(self, monkeypatch, local_user_id):
        monkeypatch.setattr(settings, "AUTH_ENABLED", False)
        monkeypatch.setattr(settings, "LOCAL_USER_ID", local_user_id)

        with pytest.raises(UnauthorizedError):
            await deps.get_context(_request(), authorization=None)


# ---------------------------------------------------------------------------
# Container and Inject
# ---------------------------------------------------------------------------


class TestInject:
    def test_resolves_field_by_protocol(self):
        assert deps._resolve_field_name(UsageServiceProtocol) == "usage_service"
        assert deps._resolve_field_name(UsageMeterProtocol) == "usage_meter"
        assert deps._resolve_field_name(BillingServiceProtocol) == "billing_service"

    def test_unknown_protocol(self):
        class NotBound:
            pass

        with pytest.raises(TypeError, match="No binding for NotBound"):
            deps.Inject(NotBound)

    def test_get_container_before_startup(self, monkeypatch):
        monkeypatch.setattr(container_mod, "container", None)
        with pytest.raises(RuntimeError, match="Container not initialized"):
            deps.get_container()

    def test_get_container_returns_global(self, monkeypatch, test_container):
        monkeypatch.setattr(container_mod, "container", test_container)
        assert deps.get_container() is test_container
