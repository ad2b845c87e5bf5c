# app_registry/core/models.py
"""Domain models for hosted applications and their domain bindings."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


PRODUCTION = "production"


class _Unset(Enum):
    TOKEN = 0


# Marks authored_require_ssl before the first normalization pass
UNSET = _Unset.TOKEN


# ============================================
# ENUMS
# ============================================

class DomainAction(str, Enum):
    """What the platform does with requests for a bound domain."""
    RESOLVE = "resolve"
    REDIRECT = "redirect"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        return cls.OTHER


# ============================================
# DOMAIN BINDINGS
# ============================================

@dataclass
class DomainBinding:
    """Custom domain attached to an application."""
    domain: str
    action: Optional[DomainAction] = None
    certificate: Optional[str] = None

    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def resolves(self) -> bool:
        # Bindings written before actions existed carry no action at all.
        return self.action is None or self.action == DomainAction.RESOLVE

    @property
    def has_certificate(self) -> bool:
        return bool(self.certificate)

    @classmethod
    def from_dict(cls, raw: Any) -> "DomainBinding":
        if isinstance(raw, str):
            return cls(domain=raw)

        raw = dict(raw)
        action = raw.pop("action", None)
        return cls(
            domain=raw.pop("domain"),
            action=DomainAction(action) if action else None,
            certificate=raw.pop("certificate", None),
            extra=raw,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data["domain"] = self.domain
        if self.action is not None:
            data["action"] = self.action.value
        if self.certificate is not None:
            data["certificate"] = self.certificate
        return data


@dataclass
class DomainRecord:
    """Modern domain ownership row: registrable domain plus optional label."""
    domain_name: str
    app_id: str
    sub_domain: Optional[str] = None

    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_domain(self) -> str:
        if self.sub_domain:
            return f"{self.sub_domain}.{self.domain_name}"
        return self.domain_name

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data.update({
            "domainName": self.domain_name,
            "subDomain": self.sub_domain,
            "appId": self.app_id,
        })
        return data


@dataclass
class LegacyDomainRecord:
    """Flat historical binding of a full host name to an application."""
    full_domain_name: str
    app_id: str


@dataclass(frozen=True)
class ParsedHost:
    """Inbound host split into registrable domain and leading label."""
    domain_name: str
    sub_domain: Optional[str] = None


# ============================================
# APPLICATION
# ============================================

# camelCase wire key -> dataclass attribute
_APPLICATION_FIELDS = {
    "appId": "app_id",
    "name": "name",
    "orgId": "org_id",
    "requireSsl": "require_ssl",
    "environments": "environments",
    "urls": "urls",
    "url": "url",
    "trafficControlRules": "traffic_control_rules",
    "configSettings": "config_settings",
    "authConfig": "auth_config",
    "domainName": "domain_name",
    "subDomain": "sub_domain",
}

_REQUEST_SCOPED = {"domainName", "subDomain", "domain"}


@dataclass
class Application:
    """Hosted application as served by the registry."""
    app_id: str
    name: str
    org_id: Optional[str] = None

    domains: List[DomainBinding] = field(default_factory=list)
    environments: List[str] = field(default_factory=list)

    require_ssl: Optional[bool] = None
    # Value from the record, before policy is applied
    authored_require_ssl: Any = field(default=UNSET, repr=False, compare=False)
    urls: Dict[str, str] = field(default_factory=dict)
    url: Optional[str] = None

    traffic_control_rules: Optional[List[Any]] = None
    config_settings: Optional[Any] = None
    auth_config: Optional[Dict[str, Any]] = None

    # Set only on results of domain lookups, never cached
    domain_name: Optional[str] = None
    sub_domain: Optional[str] = None
    domain: Optional[DomainRecord] = None

    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Application":
        """
        Build an application from its serialized (camelCase) form.

        Unknown keys are kept in ``extra`` and written back out by ``to_dict``.
        A ``domains`` value that is not a list is dropped.
        """
        raw = dict(raw)
        kwargs: Dict[str, Any] = {}
        for key, attr in _APPLICATION_FIELDS.items():
            if key in raw:
                kwargs[attr] = raw.pop(key)

        domains = raw.pop("domains", None)
        if isinstance(domains, list):
            kwargs["domains"] = [DomainBinding.from_dict(d) for d in domains]

        domain = raw.pop("domain", None)
        if isinstance(domain, dict):
            kwargs["domain"] = DomainRecord(
                domain_name=domain.get("domainName"),
                sub_domain=domain.get("subDomain"),
                app_id=domain.get("appId"),
                extra={
                    k: v for k, v in domain.items()
                    if k not in ("domainName", "subDomain", "appId")
                },
            )

        if kwargs.get("environments") is None:
            kwargs.pop("environments", None)
        if kwargs.get("urls") is None:
            kwargs.pop("urls", None)

        return cls(extra=raw, **kwargs)

    @property
    def authored_ssl(self) -> Optional[bool]:
        """SSL requirement as stored in the record, ignoring policy."""
        if self.authored_require_ssl is UNSET:
            return self.require_ssl
        return self.authored_require_ssl

    def to_dict(self, include_request_scope: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        for key, attr in _APPLICATION_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if not include_request_scope and key in _REQUEST_SCOPED:
                continue
            data[key] = value

        data["domains"] = [d.to_dict() for d in self.domains]
        if include_request_scope and self.domain is not None:
            data["domain"] = self.domain.to_dict()
        return data
