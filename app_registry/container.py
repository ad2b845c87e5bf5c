#app_registry\container.py

"""Dependency injection container - wires the registry together."""

from functools import lru_cache

from app_registry.core.config import RegistrySettings
from app_registry.core.registry import AppRegistry
from app_registry.infrastructure.memory.cache import InMemoryCache
from app_registry.infrastructure.postgres.repository import PostgresApplicationStore


# ============================================
# SETTINGS
# ============================================

@lru_cache(maxsize=1)
def get_settings() -> RegistrySettings:
    return RegistrySettings()


# ============================================
# COLLABORATORS
# ============================================

@lru_cache(maxsize=1)
def get_cache() -> InMemoryCache:
    return InMemoryCache()


@lru_cache(maxsize=1)
def get_application_store() -> PostgresApplicationStore:
    return PostgresApplicationStore()


# ============================================
# SERVICES
# ============================================

@lru_cache(maxsize=1)
def get_registry() -> AppRegistry:
    return AppRegistry(
        cache=get_cache(),
        store=get_application_store(),
        settings=get_settings(),
    )
