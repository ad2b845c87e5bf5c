#app_registry\infrastructure\postgres\repository.py

"""PostgreSQL system of record implementation using SQLAlchemy."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app_registry.core.domains import parse_host
from app_registry.core.errors import RecordStoreError
from app_registry.core.models import (
    Application, DomainBinding, DomainRecord, LegacyDomainRecord
)
from app_registry.core.repository import ApplicationStore
from app_registry.infrastructure.postgres.database import get_session_factory
from app_registry.infrastructure.postgres.models import (
    ApplicationORM, DomainORM, LegacyDomainORM
)

logger = logging.getLogger(__name__)


# ============================================
# Mapping Functions
# ============================================

def orm_to_application(orm: ApplicationORM) -> Application:
    """Convert ORM model to domain model."""
    return Application(
        app_id=orm.app_id,
        name=orm.name,
        org_id=orm.org_id,
        require_ssl=orm.require_ssl,
        domains=[DomainBinding.from_dict(d) for d in (orm.domains or [])],
        traffic_control_rules=orm.traffic_control_rules,
        config_settings=orm.config_settings,
        auth_config=orm.auth_config,
        extra=dict(orm.attributes or {}),
    )


def orm_to_domain_record(orm: DomainORM) -> DomainRecord:
    """Convert ORM model to domain model."""
    extra = {}
    if orm.certificate:
        extra["certificate"] = orm.certificate

    return DomainRecord(
        domain_name=orm.domain_name,
        sub_domain=orm.sub_domain or None,
        app_id=orm.app_id,
        extra=extra,
    )


# ============================================
# Repository
# ============================================

class PostgresApplicationStore(ApplicationStore):
    """Read-only application store backed by PostgreSQL."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    def _get_session(self):
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory()

    def get_application(self, app_id: str) -> Optional[Application]:
        """Get application by ID."""
        session = self._get_session()
        try:
            orm = session.get(ApplicationORM, app_id)
            return orm_to_application(orm) if orm else None
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to load application {app_id}: {e}") from e
        finally:
            session.close()

    def get_application_by_name(self, name: str) -> Optional[Application]:
        """Get application by name."""
        session = self._get_session()
        try:
            orm = session.execute(
                select(ApplicationORM).where(ApplicationORM.name == name)
            ).scalar_one_or_none()
            return orm_to_application(orm) if orm else None
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to load application {name}: {e}") from e
        finally:
            session.close()

    def get_domain(self, domain: str) -> Optional[DomainRecord]:
        """Get the ownership row whose full domain equals ``domain``."""
        parsed = parse_host(domain)
        candidates = [(parsed.domain_name, parsed.sub_domain or "")]
        if parsed.sub_domain:
            candidates.append((domain, ""))

        session = self._get_session()
        try:
            for domain_name, sub_domain in candidates:
                orm = session.get(DomainORM, (domain_name, sub_domain))
                if orm:
                    return orm_to_domain_record(orm)
            return None
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to load domain {domain}: {e}") from e
        finally:
            session.close()

    def get_app_id_by_domain_name(
        self,
        domain_name: str,
        sub_domain: Optional[str],
    ) -> Optional[str]:
        session = self._get_session()
        try:
            orm = session.get(DomainORM, (domain_name, sub_domain or ""))
            if not orm:
                return None
            logger.debug(f"[app_store] {sub_domain}.{domain_name} -> {orm.app_id}")
            return orm.app_id
        except SQLAlchemyError as e:
            raise RecordStoreError(
                f"Failed to resolve domain {sub_domain}.{domain_name}: {e}"
            ) from e
        finally:
            session.close()

    def get_legacy_domain(self, full_host: str) -> Optional[LegacyDomainRecord]:
        session = self._get_session()
        try:
            orm = session.get(LegacyDomainORM, full_host)
            if not orm:
                return None
            return LegacyDomainRecord(
                full_domain_name=orm.full_domain_name,
                app_id=orm.app_id,
            )
        except SQLAlchemyError as e:
            raise RecordStoreError(f"Failed to load legacy domain {full_host}: {e}") from e
        finally:
            session.close()
