# app_registry/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class RegistryError(Exception):
    """Base class for all app registry errors."""
    pass


# -----------------------------
# Collaborator Errors
# -----------------------------

class CacheError(RegistryError):
    """Cache store failed to serve a request."""
    pass


class MalformedCachePayload(CacheError):
    """Cached value could not be decoded into an application."""
    pass


class RecordStoreError(RegistryError):
    """System of record failed to serve a request."""
    pass


# -----------------------------
# Input Errors
# -----------------------------

class InvalidHostError(RegistryError):
    """Host string cannot be parsed into a domain."""
    pass
