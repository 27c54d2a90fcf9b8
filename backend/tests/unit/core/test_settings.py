"""Unit tests for Settings validation."""

from vatcounsel.core.config import Environment, PeriodKind, Settings


def test_site_url_trailing_slash_is_stripped():
    assert Settings(SITE_URL="https://vatcounsel.bg/").SITE_URL == "https://vatcounsel.bg"


def test_database_uri_is_assembled():
    s = Settings(
        POSTGRES_HOST="db",
        POSTGRES_PORT=5433,
        POSTGRES_USER="svc",
        POSTGRES_PASSWORD="pw",
        POSTGRES_DB="vat",
        SQLALCHEMY_ASYNC_DATABASE_URI=None,
    )
    assert s.SQLALCHEMY_ASYNC_DATABASE_URI == "postgresql+asyncpg://svc:pw@db:5433/vat"


def test_explicit_database_uri_wins():
    uri = "postgresql+asyncpg://other@host/db"
    assert Settings(SQLALCHEMY_ASYNC_DATABASE_URI=uri).SQLALCHEMY_ASYNC_DATABASE_URI == uri


def test_enums_parse_from_strings():
    s = Settings(ENVIRONMENT="prd", FREE_PLAN_PERIOD_KIND="trial")
    assert s.ENVIRONMENT == Environment.PRD
    assert s.FREE_PLAN_PERIOD_KIND == PeriodKind.TRIAL
    assert not s.is_local
