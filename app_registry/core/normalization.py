# app_registry/core/normalization.py
"""Fix-up pass applied to every application before it is returned or cached."""

from typing import Callable, Iterable, List, Optional

from app_registry.core.config import RegistrySettings
from app_registry.core.models import Application, DomainBinding, PRODUCTION, UNSET
from app_registry.core.urls import derive_url


DynamicEnvironments = Callable[[Application], Iterable[str]]

DEFAULT_AUTH_CONFIG = {"type": "public"}


class AppNormalizer:
    """
    Fills defaults and derives environments, SSL requirement and URLs.

    Deterministic for a given record and settings, so running it again on an
    already normalized application changes nothing.
    """

    def __init__(
        self,
        settings: RegistrySettings,
        dynamic_environments: Optional[DynamicEnvironments] = None,
    ):
        self._settings = settings
        self._dynamic_environments = dynamic_environments

    def normalize(self, app: Application) -> Application:
        if app.traffic_control_rules is None:
            app.traffic_control_rules = []

        self._fix_config_settings(app)
        if app.auth_config is None:
            app.auth_config = dict(DEFAULT_AUTH_CONFIG)

        app.environments = self.environments_for(app)

        if not isinstance(app.domains, list):
            app.domains = []

        custom_domain = self.active_custom_domain(app)

        if app.authored_require_ssl is UNSET:
            app.authored_require_ssl = app.require_ssl

        if self._settings.force_global_https:
            app.require_ssl = True
        elif self._settings.ssl_enabled and custom_domain is None:
            app.require_ssl = True
        else:
            app.require_ssl = app.authored_require_ssl

        app.urls = {
            env: derive_url(app, custom_domain, env, self._settings.virtual_host)
            for env in app.environments
        }
        app.url = app.urls[PRODUCTION]
        return app

    def environments_for(self, app: Application) -> List[str]:
        environments = [PRODUCTION]
        if self._dynamic_environments is None:
            return environments

        for env in self._dynamic_environments(app) or []:
            if env and env not in environments:
                environments.append(env)
        return environments

    def active_custom_domain(self, app: Application) -> Optional[DomainBinding]:
        """First domain binding that resolves, if custom domains are in use."""
        if not self._settings.use_custom_domains:
            return None
        if not isinstance(app.domains, list):
            return None

        for binding in app.domains:
            if binding.resolves:
                return binding
        return None

    def build_env_url(self, app: Application, environment: str) -> str:
        return derive_url(
            app,
            self.active_custom_domain(app),
            environment,
            self._settings.virtual_host,
        )

    # ============================================
    # HELPERS
    # ============================================

    def _fix_config_settings(self, app: Application) -> None:
        """
        Convert the old ``{"_default": {key: {value, sendToClient}}}`` shape
        into a list of ``{key, value, serverOnly}`` entries.
        """
        if app.config_settings is None:
            app.config_settings = []
            return

        if not isinstance(app.config_settings, dict):
            return

        defaults = app.config_settings.get("_default")
        if not defaults:
            return

        app.config_settings = [
            {
                "key": key,
                "value": setting.get("value"),
                "serverOnly": not setting.get("sendToClient"),
            }
            for key, setting in defaults.items()
        ]
