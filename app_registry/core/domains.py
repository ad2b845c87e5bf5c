# app_registry/core/domains.py
"""Inbound host parsing and host -> application ID resolution."""

import logging
from typing import Optional, Tuple

from app_registry.core.errors import InvalidHostError
from app_registry.core.models import ParsedHost
from app_registry.core.repository import ApplicationStore

logger = logging.getLogger(__name__)


def normalize_host(host: str) -> str:
    """
    Lower-case a host header value and strip port and trailing dot.

    Examples:
        "WWW.App.com:8080" -> "www.app.com"
        "app.com."         -> "app.com"
    """
    if host is None:
        raise InvalidHostError("Host is required")

    value = host.strip().lower()
    name, sep, port = value.rpartition(":")
    if sep and port.isdigit():
        value = name
    value = value.rstrip(".")

    if not value:
        raise InvalidHostError(f"Invalid host: {host!r}")
    return value


def parse_host(host: str) -> ParsedHost:
    """
    Split a host into registrable domain and leading label.

    Two labels are an apex domain with no sub domain. With more labels the
    first one is the sub domain and the rest is the registrable domain.
    """
    value = normalize_host(host)
    labels = value.split(".")

    if len(labels) <= 2:
        return ParsedHost(domain_name=value)

    return ParsedHost(domain_name=".".join(labels[1:]), sub_domain=labels[0])


class DomainResolver:
    """Two-tier host lookup: domain ownership first, legacy bindings second."""

    def __init__(self, store: ApplicationStore):
        self._store = store

    def resolve(self, host: str) -> Tuple[Optional[str], ParsedHost]:
        """
        Resolve a host to an app ID.

        Returns the app ID (None when neither tier matches) together with the
        parsed host so callers can annotate the result.
        """
        full_host = normalize_host(host)
        parsed = parse_host(full_host)

        app_id = None
        if parsed.sub_domain:
            app_id = self._store.get_app_id_by_domain_name(
                parsed.domain_name, parsed.sub_domain
            )

        if not app_id:
            logger.debug(f"[resolver] no domain ownership for {full_host}, trying legacy")
            legacy = self._store.get_legacy_domain(full_host)
            if legacy:
                app_id = legacy.app_id

        if not app_id:
            logger.debug(f"[resolver] host {full_host} not bound to any app")
            return None, parsed

        return app_id, parsed
