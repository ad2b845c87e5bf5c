#app_registry\infrastructure\postgres\models.py
"""SQLAlchemy ORM models for database tables."""

from datetime import datetime

from sqlalchemy import (
    Column, String, DateTime, JSON, Index, Boolean, ForeignKey
)
from sqlalchemy.orm import relationship

from app_registry.infrastructure.postgres.database import Base


# ============================================
# APPLICATIONS
# ============================================

class ApplicationORM(Base):
    """
    Application table - system of record for hosted apps.

    Indexes:
    - Primary key on app_id
    - Unique index on name for name lookups
    - Index on org_id for organization queries
    """

    __tablename__ = "applications"

    app_id = Column(String(64), primary_key=True, nullable=False)
    name = Column(String(255), nullable=False, unique=True, index=True)
    org_id = Column(String(64), nullable=True, index=True)

    # Authored SSL requirement; policy may still force it on
    require_ssl = Column(Boolean, nullable=True)

    # [{"domain", "action", "certificate"}]
    domains = Column(JSON, nullable=False, default=list)
    traffic_control_rules = Column(JSON, nullable=True)
    config_settings = Column(JSON, nullable=True)
    auth_config = Column(JSON, nullable=True)

    # Any further record fields, passed through untouched
    attributes = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============================================
# DOMAINS
# ============================================

class DomainORM(Base):
    """Domain ownership table - (domain_name, sub_domain) routes to one app."""

    __tablename__ = "domains"

    domain_name = Column(String(255), primary_key=True)
    # Empty string for apex bindings so the pair can be a primary key
    sub_domain = Column(String(63), primary_key=True, default="")
    app_id = Column(String(64), ForeignKey('applications.app_id'), nullable=False)

    certificate = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    application = relationship("ApplicationORM", backref="domain_bindings")

    __table_args__ = (
        Index('ix_domains_app', 'app_id'),
    )


class LegacyDomainORM(Base):
    """Flat historical host -> app bindings."""

    __tablename__ = "legacy_domains"

    full_domain_name = Column(String(255), primary_key=True)
    app_id = Column(String(64), ForeignKey('applications.app_id'), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_legacy_domains_app', 'app_id'),
    )
