# app_registry/infrastructure/memory/repository.py

import copy
from threading import Lock
from typing import Optional

from app_registry.core.domains import parse_host
from app_registry.core.models import Application, DomainRecord, LegacyDomainRecord
from app_registry.core.repository import ApplicationStore


class InMemoryApplicationStore(ApplicationStore):
    """
    Dictionary-backed system of record.

    Lookups return copies so callers can mutate results freely.
    """

    def __init__(self):
        self._apps: dict[str, Application] = {}
        self._domains: dict[tuple[str, Optional[str]], DomainRecord] = {}
        self._legacy_domains: dict[str, LegacyDomainRecord] = {}
        self._lock = Lock()

    # -------------------------
    # Seeding
    # -------------------------

    def put_application(self, app: Application) -> None:
        with self._lock:
            self._apps[app.app_id] = copy.deepcopy(app)

    def remove_application(self, app_id: str) -> None:
        with self._lock:
            self._apps.pop(app_id, None)

    def put_domain(self, record: DomainRecord) -> None:
        with self._lock:
            self._domains[(record.domain_name, record.sub_domain)] = record

    def put_legacy_domain(self, record: LegacyDomainRecord) -> None:
        with self._lock:
            self._legacy_domains[record.full_domain_name] = record

    # -------------------------
    # ApplicationStore
    # -------------------------

    def get_application(self, app_id: str) -> Optional[Application]:
        with self._lock:
            app = self._apps.get(app_id)
            return copy.deepcopy(app) if app else None

    def get_application_by_name(self, name: str) -> Optional[Application]:
        with self._lock:
            for app in self._apps.values():
                if app.name == name:
                    return copy.deepcopy(app)
        return None

    def get_domain(self, domain: str) -> Optional[DomainRecord]:
        parsed = parse_host(domain)
        with self._lock:
            record = self._domains.get((parsed.domain_name, parsed.sub_domain))
            if record is None:
                # Apex bindings for hosts with three or more labels
                record = self._domains.get((domain, None))
            return record

    def get_app_id_by_domain_name(
        self,
        domain_name: str,
        sub_domain: Optional[str],
    ) -> Optional[str]:
        with self._lock:
            record = self._domains.get((domain_name, sub_domain))
        return record.app_id if record else None

    def get_legacy_domain(self, full_host: str) -> Optional[LegacyDomainRecord]:
        with self._lock:
            return self._legacy_domains.get(full_host)
