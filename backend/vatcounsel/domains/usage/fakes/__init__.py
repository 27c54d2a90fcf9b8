"""In-memory fakes for the usage domain."""

from vatcounsel.domains.usage.fakes.repository import FakeUsageCounterRepository
from vatcounsel.domains.usage.fakes.service import FakeUsageService

__all__ = ["FakeUsageCounterRepository", "FakeUsageService"]
