# app_registry/core/urls.py
"""
URL derivation for applications.

Every environment of an application gets exactly one absolute URL. With an
active custom domain the URL is built on that domain; otherwise it is built on
the platform-assigned ``<name>.<virtual_host>`` host. Non-production
environments are addressed by suffixing the first host label with
``--<environment>``:

    production  https://www.app.com         http://blog.apphost.com
    test        https://www--test.app.com   http://blog--test.apphost.com

Apex custom domains (two labels) have no label to suffix, so their
non-production environments fall back to the platform host.
"""

from typing import Optional

from app_registry.core.models import Application, DomainBinding, PRODUCTION


def _scheme(secure: bool) -> str:
    return "https" if secure else "http"


def env_label(label: str, environment: str) -> str:
    """Suffix a host label with the environment, leaving production bare."""
    if environment == PRODUCTION:
        return label
    return f"{label}--{environment}"


def platform_url(app: Application, environment: str, virtual_host: str) -> str:
    host = f"{env_label(app.name, environment)}.{virtual_host}"
    return f"{_scheme(app.require_ssl is True)}://{host}"


def derive_url(
    app: Application,
    custom_domain: Optional[DomainBinding],
    environment: str,
    virtual_host: str,
) -> str:
    """
    Build the absolute URL of one environment of an application.

    ``app.require_ssl`` must already carry the policy-derived value; when it is
    true the scheme is always https. A custom domain without a certificate is
    otherwise served over http.
    """
    if custom_domain is None:
        return platform_url(app, environment, virtual_host)

    scheme = _scheme(app.require_ssl is True or custom_domain.has_certificate)

    if environment == PRODUCTION:
        return f"{scheme}://{custom_domain.domain}"

    labels = custom_domain.domain.split(".")
    if len(labels) < 3:
        return platform_url(app, environment, virtual_host)

    labels[0] = env_label(labels[0], environment)
    return f"{scheme}://{'.'.join(labels)}"
