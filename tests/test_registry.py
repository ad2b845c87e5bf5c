#tests\test_registry.py

"""Test cache-aside lookups through the registry."""

import json
import threading

import pytest

from app_registry.core.cache import serialize_app
from app_registry.core.config import RegistrySettings
from app_registry.core.errors import CacheError, RecordStoreError
from app_registry.core.models import (
    Application, DomainBinding, DomainRecord, LegacyDomainRecord
)
from app_registry.core.registry import AppRegistry
from app_registry.infrastructure.memory.cache import InMemoryCache


def add_to_cache(memory_cache, app):
    memory_cache.setex("app_" + app.app_id, 300, serialize_app(app))
    memory_cache.setex("app_name_" + app.name, 300, app.app_id)


class TestGetById:
    """Test lookups by application ID."""

    def test_app_in_cache(self, registry, cache, store, memory_cache, sample_app):
        """Test a cache hit does not touch the record store."""
        add_to_cache(memory_cache, sample_app)

        app = registry.get_by_id("123")

        cache.get.assert_called_once_with("app_123")
        store.get_application.assert_not_called()
        assert app.app_id == "123"
        assert app.url == "http://appname.apphost.com"

    def test_app_not_in_cache_but_in_store(self, registry, cache, store, memory_store, memory_cache, sample_app):
        """Test a miss loads from the store and writes both cache keys."""
        memory_store.put_application(sample_app)

        app = registry.get_by_id("123")

        cache.get.assert_called_once_with("app_123")
        store.get_application.assert_called_once_with("123")
        assert app.app_id == "123"
        assert "app_123" in memory_cache
        assert memory_cache.get("app_name_appname") == "123"

        cached = json.loads(memory_cache.get("app_123"))
        assert cached["appId"] == "123"
        assert cached["url"] == "http://appname.apphost.com"

    def test_app_not_found(self, registry, cache, store):
        """Test an unknown ID returns None without caching anything."""
        assert registry.get_by_id("123") is None

        store.get_application.assert_called_once_with("123")
        cache.setex.assert_not_called()

    def test_second_read_served_from_cache(self, registry, store, memory_store, sample_app):
        """Test the store is consulted once across two reads."""
        memory_store.put_application(sample_app)

        registry.get_by_id("123")
        registry.get_by_id("123")

        assert store.get_application.call_count == 1

    def test_force_reload(self, registry, cache, store, memory_store, memory_cache, sample_app):
        """Test force_reload skips the cache read but still writes through."""
        add_to_cache(memory_cache, Application(app_id="123", name="stale"))
        memory_store.put_application(sample_app)

        app = registry.get_by_id("123", force_reload=True)

        cache.get.assert_not_called()
        store.get_application.assert_called_once_with("123")
        assert app.name == "appname"
        assert json.loads(memory_cache.get("app_123"))["name"] == "appname"

    def test_malformed_cache_payload_is_a_miss(self, registry, store, memory_store, memory_cache, sample_app):
        """Test an undecodable cache entry falls through to the store."""
        memory_cache.setex("app_123", 300, "{not json")
        memory_store.put_application(sample_app)

        app = registry.get_by_id("123")

        assert app.app_id == "123"
        store.get_application.assert_called_once_with("123")

    def test_cached_payload_missing_fields_is_a_miss(self, registry, store, memory_store, memory_cache, sample_app):
        memory_cache.setex("app_123", 300, json.dumps({"name": "appname"}))
        memory_store.put_application(sample_app)

        assert registry.get_by_id("123").app_id == "123"
        store.get_application.assert_called_once_with("123")

    def test_cache_disabled(self, cache, store, memory_store, settings, sample_app):
        """Test a disabled cache is neither read nor written."""
        memory_store.put_application(sample_app)
        registry = AppRegistry(
            cache=cache,
            store=store,
            settings=settings.model_copy(update={"cache_enabled": False}),
        )

        assert registry.get_by_id("123").app_id == "123"
        cache.get.assert_not_called()
        cache.setex.assert_not_called()

    def test_cache_error_propagates(self, registry, cache, store):
        """Test a failing cache read aborts the lookup."""
        cache.get.side_effect = CacheError("cache down")

        with pytest.raises(CacheError):
            registry.get_by_id("123")
        store.get_application.assert_not_called()

    def test_store_error_propagates(self, registry, store):
        """Test a failing store read aborts the lookup."""
        store.get_application.side_effect = RecordStoreError("db down")

        with pytest.raises(RecordStoreError):
            registry.get_by_id("123")

    def test_cache_write_failure_does_not_fail_lookup(self, registry, cache, memory_store, sample_app):
        """Test cache writes are best effort."""
        cache.setex.side_effect = CacheError("cache full")
        memory_store.put_application(sample_app)

        assert registry.get_by_id("123").app_id == "123"

    def test_cache_hit_reflects_current_policy(self, cache, store, memory_cache, settings, sample_app):
        """Test policy changes apply to entries cached before the change."""
        add_to_cache(memory_cache, sample_app)
        registry = AppRegistry(
            cache=cache,
            store=store,
            settings=settings.model_copy(update={"ssl_enabled": True}),
        )

        app = registry.get_by_id("123")

        assert app.require_ssl is True
        assert app.url == "https://appname.apphost.com"

    def test_expired_entry_reloads(self, registry, store, memory_store, clock, sample_app):
        """Test entries are reloaded from the store after their TTL."""
        memory_store.put_application(sample_app)

        registry.get_by_id("123")
        clock.advance(301)
        registry.get_by_id("123")

        assert store.get_application.call_count == 2


class TestBatchGetById:
    """Test batched lookups."""

    def test_missing_ids_dropped(self, registry, memory_store):
        """Test only existing apps are returned."""
        memory_store.put_application(Application(app_id="1", name="one"))
        memory_store.put_application(Application(app_id="2", name="two"))

        apps = registry.batch_get_by_id(["1", "2", "3"])

        assert sorted(app.app_id for app in apps) == ["1", "2"]

    def test_empty_batch(self, registry, store):
        assert registry.batch_get_by_id([]) == []
        store.get_application.assert_not_called()

    def test_failure_fails_whole_batch(self, registry, store, memory_store):
        """Test one failing lookup fails the batch."""
        memory_store.put_application(Application(app_id="1", name="one"))

        def get_application(app_id):
            if app_id == "2":
                raise RecordStoreError("db down")
            return memory_store.get_application(app_id)

        store.get_application.side_effect = get_application

        with pytest.raises(RecordStoreError):
            registry.batch_get_by_id(["1", "2", "3"])

    def test_lookups_run_concurrently(self, registry, store, memory_store):
        """Test lookups overlap instead of running one after another."""
        barrier = threading.Barrier(3, timeout=5)
        for app_id in ("1", "2", "3"):
            memory_store.put_application(Application(app_id=app_id, name=f"app{app_id}"))

        def get_application(app_id):
            barrier.wait()
            return memory_store.get_application(app_id)

        store.get_application.side_effect = get_application

        apps = registry.batch_get_by_id(["1", "2", "3"], force_reload=True)

        assert len(apps) == 3


class TestGetByName:
    """Test lookups by application name."""

    def test_app_in_cache(self, registry, cache, store, memory_cache, sample_app):
        """Test the name alias leads to the cached app."""
        add_to_cache(memory_cache, sample_app)

        app = registry.get_by_name("appname")

        cache.get.assert_any_call("app_name_appname")
        cache.get.assert_any_call("app_123")
        store.get_application_by_name.assert_not_called()
        assert app.app_id == "123"

    def test_app_not_in_cache_but_in_store(self, registry, cache, store, memory_store, memory_cache, sample_app):
        """Test a miss loads by name and writes both cache keys."""
        memory_store.put_application(sample_app)

        app = registry.get_by_name("appname")

        cache.get.assert_called_once_with("app_name_appname")
        store.get_application_by_name.assert_called_once_with("appname")
        assert app.url == "http://appname.apphost.com"
        assert memory_cache.get("app_name_appname") == "123"
        assert "app_123" in memory_cache

    def test_app_not_found(self, registry, cache):
        assert registry.get_by_name("missing") is None
        cache.setex.assert_not_called()

    def test_force_reload_skips_both_cache_tiers(self, registry, cache, store, memory_store, memory_cache, sample_app):
        """Test force_reload ignores the alias and the app entry."""
        add_to_cache(memory_cache, sample_app)
        memory_store.put_application(sample_app)

        registry.get_by_name("appname", force_reload=True)

        cache.get.assert_not_called()
        store.get_application_by_name.assert_called_once_with("appname")

    def test_stale_alias_falls_back_to_name_lookup(self, registry, store, memory_store, memory_cache):
        """Test an alias to a vanished app is not trusted."""
        memory_cache.setex("app_name_appname", 300, "999")
        memory_store.put_application(Application(app_id="123", name="appname"))

        app = registry.get_by_name("appname")

        assert app.app_id == "123"
        store.get_application_by_name.assert_called_once_with("appname")


class TestGetByDomain:
    """Test lookups by inbound host."""

    def test_modern_binding(self, registry, memory_store, sample_app):
        """Test a domain ownership match annotates the result."""
        memory_store.put_application(sample_app)
        memory_store.put_domain(DomainRecord(domain_name="app.com", sub_domain="www", app_id="123"))

        app = registry.get_by_domain("www.app.com")

        assert app.app_id == "123"
        assert app.domain_name == "app.com"
        assert app.sub_domain == "www"

    def test_legacy_binding(self, registry, memory_store, sample_app):
        """Test the legacy table is used when domain ownership misses."""
        memory_store.put_application(sample_app)
        memory_store.put_legacy_domain(LegacyDomainRecord(full_domain_name="app.com", app_id="123"))

        app = registry.get_by_domain("app.com")

        assert app.app_id == "123"
        assert app.domain_name == "app.com"
        assert app.sub_domain is None

    def test_unbound_host(self, registry, store):
        assert registry.get_by_domain("www.nothing.com") is None
        store.get_application.assert_not_called()

    def test_bound_to_missing_app(self, registry, memory_store):
        memory_store.put_domain(DomainRecord(domain_name="app.com", sub_domain="www", app_id="gone"))
        assert registry.get_by_domain("www.app.com") is None

    def test_annotation_is_not_cached(self, registry, memory_store, memory_cache, sample_app):
        """Test the parsed host never reaches the cache."""
        memory_store.put_application(sample_app)
        memory_store.put_domain(DomainRecord(domain_name="app.com", sub_domain="www", app_id="123"))

        registry.get_by_domain("www.app.com")
        cached = json.loads(memory_cache.get("app_123"))

        assert "domainName" not in cached
        assert "subDomain" not in cached

    def test_existing_domain_name_kept(self, registry, memory_store):
        """Test records that already carry a domain name are not re-stamped."""
        memory_store.put_application(Application(app_id="123", name="appname", domain_name="own.com"))
        memory_store.put_domain(DomainRecord(domain_name="app.com", sub_domain="www", app_id="123"))

        app = registry.get_by_domain("www.app.com", force_reload=True)

        assert app.domain_name == "own.com"


class TestGetByRegisteredDomain:
    """Test the older single-tier domain lookup."""

    def test_attaches_domain_record(self, registry, memory_store, sample_app):
        memory_store.put_application(sample_app)
        record = DomainRecord(domain_name="app.com", sub_domain="www", app_id="123")
        memory_store.put_domain(record)

        app = registry.get_by_registered_domain("www.app.com")

        assert app.app_id == "123"
        assert app.domain == record

    def test_unknown_domain(self, registry, store):
        assert registry.get_by_registered_domain("www.app.com") is None
        store.get_application.assert_not_called()


class TestCacheManagement:
    """Test flush and add."""

    def test_flush_forces_reload(self, registry, store, memory_store, memory_cache, sample_app):
        """Test flushing makes the next read hit the store again."""
        memory_store.put_application(sample_app)
        app = registry.get_by_id("123")

        registry.flush_app(app)

        assert "app_123" not in memory_cache
        assert "app_name_appname" not in memory_cache

        registry.get_by_id("123")
        assert store.get_application.call_count == 2

    def test_flush_propagates_cache_errors(self, registry, cache, sample_app):
        cache.delete.side_effect = CacheError("cache down")
        with pytest.raises(CacheError):
            registry.flush_app(sample_app)

    def test_add_primes_cache(self, registry, store, memory_cache):
        """Test an added app is served without touching the store."""
        added = registry.add(Application(
            app_id="123",
            name="appname",
            domains=[DomainBinding(domain="www.app.com", certificate="abc")],
        ))

        app = registry.get_by_id("123")

        assert added.url == "https://www.app.com"
        assert app.url == added.url
        assert memory_cache.get("app_name_appname") == "123"
        store.get_application.assert_not_called()

    def test_build_env_url(self, registry, sample_app):
        registry.add(sample_app)
        assert registry.build_env_url(sample_app, "test") == "http://appname--test.apphost.com"


class TestScenarios:
    """End-to-end URL scenarios over the registry."""

    @pytest.mark.parametrize("overrides, domains, expected", [
        ({}, [], "http://test.apphost.com"),
        ({"ssl_enabled": True}, [], "https://test.apphost.com"),
        ({}, [{"domain": "www.app.com", "action": "resolve", "certificate": "abc"}], "https://www.app.com"),
        ({}, [{"domain": "www.app.com", "action": "resolve"}], "http://www.app.com"),
    ])
    def test_url(self, cache, store, memory_store, overrides, domains, expected):
        memory_store.put_application(Application.from_dict({"appId": "1", "name": "test", "domains": domains}))
        settings = RegistrySettings(virtual_host="apphost.com", _env_file=None, **overrides)
        registry = AppRegistry(cache=cache, store=store, settings=settings)

        assert registry.get_by_id("1").url == expected
        assert registry.get_by_id("1").url == expected


class TestPolicyAcrossCacheReaders:
    """Test cached entries follow the reader's policy, not the writer's."""

    @pytest.fixture
    def shared_cache(self, clock):
        return InMemoryCache(clock=clock)

    def make_registry(self, shared_cache, memory_store, **policy):
        settings = RegistrySettings(virtual_host="apphost.com", _env_file=None, **policy)
        return AppRegistry(cache=shared_cache, store=memory_store, settings=settings)

    def test_ssl_turned_off_after_caching(self, shared_cache, memory_store):
        """Test an entry cached under SSL policy reads as http without it."""
        memory_store.put_application(Application(app_id="1", name="test"))
        writer = self.make_registry(shared_cache, memory_store, ssl_enabled=True)
        reader = self.make_registry(shared_cache, memory_store)

        assert writer.get_by_id("1").url == "https://test.apphost.com"

        cached = reader.get_by_id("1")
        fresh = reader.get_by_id("1", force_reload=True)

        assert cached.url == fresh.url == "http://test.apphost.com"
        assert cached.require_ssl is None

    def test_force_https_turned_off_after_caching(self, shared_cache, memory_store):
        memory_store.put_application(Application(
            app_id="1",
            name="test",
            domains=[DomainBinding(domain="www.app.com")],
        ))
        self.make_registry(shared_cache, memory_store, force_global_https=True).get_by_id("1")

        assert self.make_registry(shared_cache, memory_store).get_by_id("1").url == "http://www.app.com"

    def test_ssl_turned_on_after_caching(self, shared_cache, memory_store):
        memory_store.put_application(Application(app_id="1", name="test"))
        self.make_registry(shared_cache, memory_store).get_by_id("1")

        app = self.make_registry(shared_cache, memory_store, ssl_enabled=True).get_by_id("1")

        assert app.url == "https://test.apphost.com"

    def test_authored_ssl_survives_caching(self, shared_cache, memory_store):
        """Test an SSL requirement set on the record is kept under any policy."""
        memory_store.put_application(Application(app_id="1", name="test", require_ssl=True))
        self.make_registry(shared_cache, memory_store, ssl_enabled=True).get_by_id("1")

        assert json.loads(shared_cache.get("app_1"))["requireSsl"] is True
        assert self.make_registry(shared_cache, memory_store).get_by_id("1").url == "https://test.apphost.com"

    def test_cached_payload_holds_authored_value(self, shared_cache, memory_store):
        """Test the policy-derived requirement never reaches the cache."""
        memory_store.put_application(Application(app_id="1", name="test"))

        app = self.make_registry(shared_cache, memory_store, ssl_enabled=True).get_by_id("1")

        assert app.require_ssl is True
        assert "requireSsl" not in json.loads(shared_cache.get("app_1"))
