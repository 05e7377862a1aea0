"""
Health check for the catalog API.

Each component reports a ``health`` level; the overall status is the worst
of them. The catalog store is required (down means critical); the cache is
optional (down only degrades).

Thresholds:
- Store latency (SELECT 1): warning at 100ms, critical at 500ms
- Store pool checked out: warning at 70%, critical at 90%
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from sqlalchemy.engine import Engine

from config.database import check_connection
from services.cache_service import CacheService

router = APIRouter(tags=["health"])

THRESHOLDS = {
    "store_latency_ms": {"warning": 100.0, "critical": 500.0},
    "store_pool_percent": {"warning": 70.0, "critical": 90.0},
}

# worst first
_LEVELS = ("critical", "degraded", "warning", "healthy")


def evaluate_health_level(*levels: str) -> str:
    for level in _LEVELS:
        if level in levels:
            return level
    return "healthy"


def _against(value: float, threshold_name: str) -> str:
    limits = THRESHOLDS[threshold_name]
    if value >= limits["critical"]:
        return "critical"
    if value >= limits["warning"]:
        return "warning"
    return "healthy"


def _timed(probe):
    start = time.perf_counter()
    ok = probe()
    return ok, round((time.perf_counter() - start) * 1000, 2)


def store_check(engine: Engine) -> dict:
    up, latency_ms = _timed(lambda: check_connection(engine))
    if not up:
        return {"status": "down", "health": "critical", "latency_ms": None}
    return {"status": "up", "health": _against(latency_ms, "store_latency_ms"), "latency_ms": latency_ms}


def pool_check(engine: Engine) -> dict:
    pool = engine.pool
    # only QueuePool keeps size/overflow accounting
    if not hasattr(pool, "checkedout") or not hasattr(pool, "size"):
        return {"health": "healthy", "pool": type(pool).__name__}

    capacity = pool.size() + max(pool.overflow(), 0)
    in_use = pool.checkedout()
    percent = round(in_use / capacity * 100, 1) if capacity else 0.0
    return {
        "health": _against(percent, "store_pool_percent"),
        "pool": type(pool).__name__,
        "in_use": in_use,
        "capacity": capacity,
        "in_use_percent": percent,
    }


def cache_check(cache: CacheService) -> dict:
    if not cache.is_available():
        return {"status": "disabled", "health": "healthy"}
    up, latency_ms = _timed(cache.ping)
    return {
        "status": "up" if up else "down",
        "health": "healthy" if up else "degraded",
        "latency_ms": latency_ms if up else None,
        "provider": "Upstash",
    }


@router.get("/")
def health_check(request: Request):
    engine = request.app.state.engine
    checks = {
        "database": store_check(engine),
        "db_pool": pool_check(engine),
        "cache": cache_check(request.app.state.cache_service),
    }
    return {
        "status": evaluate_health_level(*(check["health"] for check in checks.values())),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "thresholds": THRESHOLDS,
        "checks": checks,
    }
