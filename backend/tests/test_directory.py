from redis.exceptions import ConnectionError as RedisConnectionError

from agenda.services.slots import ProviderDef, ServiceDef, StoreConfig, WeeklyHours
from agenda.services.slots.directory import StoreDirectory
from agenda.services.slots.profile_cache import StoreProfileCache, invalidate_store_cache

from conftest import FakeRedis


def test_directory_maps_rows_to_domain_types(seeded_db):
    directory = StoreDirectory(seeded_db)

    assert directory.get_store_config(1) == StoreConfig(
        store_id=1,
        timezone="America/Sao_Paulo",
        slot_step_minutes=30,
        buffer_before_minutes=0,
        buffer_after_minutes=10,
    )
    hours = directory.get_weekly_hours(1)
    assert [h.day_of_week for h in hours] == list(range(7))
    assert hours[0] == WeeklyHours(day_of_week=0, is_closed=False, open_time="08:00:00", close_time="18:00:00")
    assert directory.get_service(10) == ServiceDef(service_id=10, duration_minutes=45, name="Corte")
    assert directory.get_provider(100) == ProviderDef(provider_id=100, capacity=2, name="Ana")


def test_directory_reports_missing_and_inactive(seeded_db):
    directory = StoreDirectory(seeded_db)

    assert directory.get_store_config(999) is None
    assert directory.get_weekly_hours(999) == []
    assert directory.get_service(11) is None
    assert directory.get_provider(101) is None


class _ExplodingDirectory:
    def get_store_config(self, store_id):
        raise AssertionError("directory should not be hit on a cache hit")

    get_weekly_hours = get_store_config


def test_profile_cache_reads_through_then_hits(seeded_db):
    redis = FakeRedis()
    cache = StoreProfileCache(redis, ttl_seconds=60)

    store, hours = cache.get_profile(StoreDirectory(seeded_db), 1)
    cached_store, cached_hours = cache.get_profile(_ExplodingDirectory(), 1)

    assert redis.ttls == {"agenda:store:1": 60}
    assert cached_store == store
    assert cached_hours == hours
    assert len(cached_hours) == 7


def test_profile_cache_remembers_missing_store(seeded_db):
    cache = StoreProfileCache(FakeRedis())

    assert cache.get_profile(StoreDirectory(seeded_db), 999) == (None, [])
    assert cache.get_profile(_ExplodingDirectory(), 999) == (None, [])


def test_invalidate_store_cache(seeded_db):
    redis = FakeRedis()
    StoreProfileCache(redis).get_profile(StoreDirectory(seeded_db), 1)

    assert invalidate_store_cache(redis, 1) == 1
    assert invalidate_store_cache(redis, 1) == 0
    assert redis.data == {}


class _DownRedis(FakeRedis):
    def get(self, key):
        raise RedisConnectionError("connection refused")


def test_profile_cache_falls_back_when_redis_is_down(seeded_db):
    store, hours = StoreProfileCache(_DownRedis()).get_profile(StoreDirectory(seeded_db), 1)

    assert store.store_id == 1
    assert len(hours) == 7
