# app_registry/core/repository.py

from abc import ABC, abstractmethod
from typing import Optional

from app_registry.core.models import Application, DomainRecord, LegacyDomainRecord


class ApplicationStore(ABC):
    """
    Read contract for the system of record.
    All lookups return None when nothing matches; failures raise RecordStoreError.
    """

    @abstractmethod
    def get_application(self, app_id: str) -> Optional[Application]:
        """
        Fetch application by ID.
        """
        raise NotImplementedError

    @abstractmethod
    def get_application_by_name(self, name: str) -> Optional[Application]:
        """
        Fetch application by its unique name.
        """
        raise NotImplementedError

    @abstractmethod
    def get_domain(self, domain: str) -> Optional[DomainRecord]:
        """
        Fetch the ownership record whose full domain equals domain.
        Used by the older single-tier lookup.
        """
        raise NotImplementedError

    @abstractmethod
    def get_app_id_by_domain_name(
        self,
        domain_name: str,
        sub_domain: Optional[str],
    ) -> Optional[str]:
        """
        Resolve a (registrable domain, sub domain) pair to an app ID.
        """
        raise NotImplementedError

    @abstractmethod
    def get_legacy_domain(self, full_host: str) -> Optional[LegacyDomainRecord]:
        """
        Fetch the flat historical binding for a full host name.
        """
        raise NotImplementedError
