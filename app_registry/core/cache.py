# app_registry/core/cache.py

import json
from abc import ABC, abstractmethod
from typing import Optional

from app_registry.core.errors import MalformedCachePayload
from app_registry.core.models import Application


class CacheStore(ABC):
    """
    Key-value cache contract consumed by the registry.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Fetch the serialized value for key.
        Returns None on a miss. Store failures must raise, not return None.
        """
        raise NotImplementedError

    @abstractmethod
    def setex(self, key: str, ttl: int, value: str) -> None:
        """
        Store value under key, expiring after ttl seconds.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Remove key. Removing a missing key is not an error.
        """
        raise NotImplementedError


class CacheKeys:
    """Formats cache keys for application entries and name aliases."""

    def __init__(self, prefix: str):
        self._prefix = prefix

    def app(self, app_id: str) -> str:
        return f"{self._prefix}{app_id}"

    def name(self, name: str) -> str:
        return f"{self._prefix}name_{name}"


def serialize_app(app: Application) -> str:
    """
    Encode an application for the cache.

    Request-scoped fields are dropped and ``requireSsl`` holds the authored
    value, so readers derive it again under their own policy.
    """
    data = app.to_dict(include_request_scope=False)
    data.pop("requireSsl", None)
    if app.authored_ssl is not None:
        data["requireSsl"] = app.authored_ssl
    return json.dumps(data, sort_keys=True)


def deserialize_app(payload: str) -> Application:
    try:
        raw = json.loads(payload)
        if not isinstance(raw, dict):
            raise TypeError(f"expected object, got {type(raw).__name__}")
        return Application.from_dict(raw)
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise MalformedCachePayload(f"Cannot decode cached application: {e}") from e
