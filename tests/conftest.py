#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import MagicMock

from app_registry.core.config import RegistrySettings
from app_registry.core.models import Application
from app_registry.core.registry import AppRegistry
from app_registry.infrastructure.memory.cache import InMemoryCache
from app_registry.infrastructure.memory.repository import InMemoryApplicationStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    """Default policy: no SSL, custom domains on, apphost.com virtual host."""
    return RegistrySettings(
        cache_prefix="app_",
        cache_ttl=300,
        cache_enabled=True,
        use_custom_domains=True,
        force_global_https=False,
        ssl_enabled=False,
        virtual_host="apphost.com",
        _env_file=None,
    )


@pytest.fixture
def memory_cache(clock):
    """Real in-memory cache, for seeding and inspecting entries."""
    return InMemoryCache(clock=clock)


@pytest.fixture
def cache(memory_cache):
    """Spy around the in-memory cache."""
    return MagicMock(wraps=memory_cache)


@pytest.fixture
def memory_store():
    """Real in-memory record store, for seeding."""
    return InMemoryApplicationStore()


@pytest.fixture
def store(memory_store):
    """Spy around the in-memory record store."""
    return MagicMock(wraps=memory_store)


@pytest.fixture
def registry(cache, store, settings):
    """Registry wired to spy collaborators."""
    return AppRegistry(cache=cache, store=store, settings=settings)


@pytest.fixture
def sample_app():
    """Create a sample application record."""
    return Application(app_id="123", name="appname")
