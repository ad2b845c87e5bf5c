# app_registry/core/registry.py
"""Application registry - cache-aside lookups over the system of record."""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Iterable, List, Optional

from app_registry.core.cache import CacheKeys, CacheStore, deserialize_app, serialize_app
from app_registry.core.config import RegistrySettings
from app_registry.core.domains import DomainResolver, normalize_host
from app_registry.core.errors import MalformedCachePayload
from app_registry.core.models import Application
from app_registry.core.normalization import AppNormalizer, DynamicEnvironments
from app_registry.core.repository import ApplicationStore

logger = logging.getLogger(__name__)


class AppRegistry:
    """
    Resolves applications by ID, name or host.

    Reads go to the cache first and fall back to the record store on a miss,
    writing the normalized application back under both its ID key and its
    name alias. Every application is normalized on the way out, including
    cache hits, so policy changes apply without flushing the cache.
    """

    def __init__(
        self,
        cache: CacheStore,
        store: ApplicationStore,
        settings: Optional[RegistrySettings] = None,
        dynamic_environments: Optional[DynamicEnvironments] = None,
    ):
        self._cache = cache
        self._store = store
        self._settings = settings or RegistrySettings()
        self._keys = CacheKeys(self._settings.cache_prefix)
        self._normalizer = AppNormalizer(self._settings, dynamic_environments)
        self._resolver = DomainResolver(store)

    @property
    def settings(self) -> RegistrySettings:
        return self._settings

    # ============================================
    # LOOKUPS
    # ============================================

    def get_by_id(self, app_id: str, force_reload: bool = False) -> Optional[Application]:
        """Get application by ID. ``force_reload`` skips the cache read only."""
        if force_reload or not self._settings.cache_enabled:
            return self._fetch_by_id(app_id)

        logger.debug(f"[registry] looking up app {app_id} in cache")
        payload = self._cache.get(self._keys.app(app_id))
        if payload is not None:
            try:
                app = deserialize_app(payload)
            except MalformedCachePayload as e:
                logger.warning(f"[registry] ignoring cached app {app_id}: {e}")
            else:
                return self._normalizer.normalize(app)

        return self._fetch_by_id(app_id)

    def batch_get_by_id(
        self,
        app_ids: Iterable[str],
        force_reload: bool = False,
    ) -> List[Application]:
        """
        Get several applications concurrently.

        IDs that match nothing are dropped. The first failure of any lookup
        fails the whole batch and no partial result is returned.
        """
        app_ids = list(app_ids)
        if not app_ids:
            return []

        workers = min(self._settings.batch_concurrency, len(app_ids))
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="app-registry")
        try:
            futures = [
                executor.submit(self.get_by_id, app_id, force_reload)
                for app_id in app_ids
            ]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)

            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()

            return [app for app in (f.result() for f in futures) if app is not None]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def get_by_name(self, name: str, force_reload: bool = False) -> Optional[Application]:
        """Get application by name via the cached name -> ID alias."""
        if not force_reload and self._settings.cache_enabled:
            logger.debug(f"[registry] looking up app with name: {name}")
            app_id = self._cache.get(self._keys.name(name))
            if app_id:
                app = self.get_by_id(app_id)
                if app is not None:
                    return app
                logger.debug(f"[registry] name alias {name} -> {app_id} is stale")

        app = self._store.get_application_by_name(name)
        if app is None:
            logger.debug(f"[registry] cannot find app with name {name}")
            return None

        logger.debug(f"[registry] found app in store with name: {name}")
        self._normalizer.normalize(app)
        self._add_to_cache(app)
        return app

    def get_by_domain(self, host: str, force_reload: bool = False) -> Optional[Application]:
        """
        Get the application serving an inbound host.

        The result carries ``domain_name``/``sub_domain`` parsed from the host
        unless the record already has them. Those fields are never cached.
        """
        app_id, parsed = self._resolver.resolve(host)
        if app_id is None:
            return None

        app = self.get_by_id(app_id, force_reload=force_reload)
        if app is not None and not app.domain_name:
            app.domain_name = parsed.domain_name
            app.sub_domain = parsed.sub_domain
        return app

    def get_by_registered_domain(
        self,
        domain: str,
        force_reload: bool = False,
    ) -> Optional[Application]:
        """Older single-tier lookup: full domain -> ownership record -> app."""
        domain = normalize_host(domain)
        logger.debug(f"[registry] get domain {domain}")

        record = self._store.get_domain(domain)
        if record is None:
            logger.debug(f"[registry] domain {domain} not found")
            return None

        app = self.get_by_id(record.app_id, force_reload=force_reload)
        if app is not None:
            app.domain = record
        return app

    # ============================================
    # CACHE MANAGEMENT
    # ============================================

    def flush_app(self, app: Application) -> None:
        """Drop the cached entries of an app so the next read reloads it."""
        logger.debug(f"[registry] flushing app {app.app_id} from cache")
        self._cache.delete(self._keys.app(app.app_id))
        self._cache.delete(self._keys.name(app.name))

    def add(self, app: Application) -> Application:
        """Normalize an app the caller already holds and prime the cache with it."""
        self._normalizer.normalize(app)
        self._add_to_cache(app)
        return app

    def build_env_url(self, app: Application, environment: str) -> str:
        return self._normalizer.build_env_url(app, environment)

    # ============================================
    # HELPERS
    # ============================================

    def _fetch_by_id(self, app_id: str) -> Optional[Application]:
        app = self._store.get_application(app_id)
        if app is None:
            logger.debug(f"[registry] cannot find app {app_id} in store")
            return None

        logger.debug(f"[registry] found application {app_id} in store")
        self._normalizer.normalize(app)
        self._add_to_cache(app)
        return app

    def _add_to_cache(self, app: Application) -> None:
        if not self._settings.cache_enabled:
            return

        ttl = self._settings.cache_ttl
        try:
            logger.debug(f"[registry] writing app {app.app_id} to cache")
            self._cache.setex(self._keys.app(app.app_id), ttl, serialize_app(app))
            self._cache.setex(self._keys.name(app.name), ttl, str(app.app_id))
        except Exception as e:
            logger.warning(f"[registry] failed to cache app {app.app_id}: {e}")
