from unittest.mock import MagicMock

import pytest

from controllers.health_check import cache_check, evaluate_health_level, pool_check, store_check
from services.cache_service import CacheService


@pytest.mark.parametrize("levels, expected", [
    (("healthy", "healthy"), "healthy"),
    (("healthy", "warning"), "warning"),
    (("warning", "degraded"), "degraded"),
    (("degraded", "critical", "healthy"), "critical"),
    ((), "healthy"),
])
def test_overall_level_is_the_worst(levels, expected):
    assert evaluate_health_level(*levels) == expected


def test_store_up(engine):
    check = store_check(engine)

    assert check["status"] == "up"
    assert check["latency_ms"] is not None


def test_store_down_is_critical():
    engine = MagicMock()
    engine.connect.side_effect = RuntimeError("connection refused")

    assert store_check(engine) == {"status": "down", "health": "critical", "latency_ms": None}


def test_idle_pool_is_healthy(engine):
    assert pool_check(engine)["health"] == "healthy"


def test_unreachable_cache_only_degrades(fake_redis):
    fake_redis.is_available = lambda: False

    check = cache_check(CacheService(fake_redis))

    assert check["status"] == "down"
    assert check["health"] == "degraded"


def test_unconfigured_cache_is_disabled():
    assert cache_check(CacheService())["status"] == "disabled"
