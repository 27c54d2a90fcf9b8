"""Configuration module for the VAT Counsel backend.

Provides centralized configuration management with type-safe enums.

Usage:
    from vatcounsel.core.config import settings, Environment

    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from vatcounsel.core.config.enums import Environment, PeriodKind
from vatcounsel.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "PeriodKind",
    "settings",
]

# Singleton settings instance
settings = Settings()
