"""Configuration enums for type-safe settings.

These enums provide type safety and IDE autocomplete for configuration values.
They inherit from str to maintain JSON serialization compatibility.
"""

from enum import Enum


class Environment(str, Enum):
    """Deployment environments.

    Controls environment-specific behavior like logging format and which
    payment gateway implementation the container wires in.
    """

    LOCAL = "local"
    TEST = "test"
    DEV = "dev"
    PRD = "prd"


class PeriodKind(str, Enum):
    """How a plan's accounting window is laid out.

    MONTHLY windows recur every month from the account's creation day.
    TRIAL windows are a single fixed 7-day span starting at account creation.
    """

    MONTHLY = "monthly"
    TRIAL = "trial"
