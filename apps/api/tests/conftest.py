"""
Pytest configuration and fixtures

Nothing here touches a real Redis or the network: the insight cache runs on
FakeRedis and the HTTP tests swap collaborators through
app.dependency_overrides.
"""
import pytest
import random
import sys
import os

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.event_store import InMemoryEventStore
from services.insight_cache import InsightCache
from tests.wellness_factories import DAY, TZ, FakeRedis


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def day():
    return DAY


@pytest.fixture
def rng():
    """Seeded source for supportive-line picks."""
    return random.Random(42)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def insight_cache(fake_redis, tz):
    return InsightCache(fake_redis, tz=tz)


@pytest.fixture
def store():
    return InMemoryEventStore()
