import fnmatch
import os

# Must be set before any application module reads the settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ.pop("UPSTASH_REDIS_REST_URL", None)
os.environ.pop("UPSTASH_REDIS_REST_TOKEN", None)

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from config.database import build_engine, build_session_factory, create_tables  # noqa: E402
from config.settings import Settings  # noqa: E402
from main import create_fastapi_app  # noqa: E402
from repositories.category_repository import CategoryRepository  # noqa: E402
from repositories.product_repository import ProductRepository  # noqa: E402
from schemas.product_schema import ProductSchema  # noqa: E402
from services.auth_service import IdentityVerifier  # noqa: E402
from services.cache_service import CacheService  # noqa: E402
from utils.exceptions import UnauthenticatedError  # noqa: E402

TOKENS = {
    "token-alice": "alice",
    "token-bob": "bob",
}


class StaticTokenVerifier(IdentityVerifier):
    """Identity provider stand-in: a fixed token -> user id table."""

    def __init__(self, tokens):
        self.tokens = dict(tokens)

    def verify(self, token: str) -> str:
        try:
            return self.tokens[token]
        except KeyError:
            raise UnauthenticatedError("Invalid authentication token")


class SteppingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


class InMemoryRedis:
    """Stands in for the Upstash REST client."""

    enabled = True

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ttl=None):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def keys(self, pattern):
        return [key for key in self.data if fnmatch.fnmatch(key, pattern)]

    def is_available(self):
        return True


def pytest_collection_modifyitems(config, items):
    """Mark API tests as integration tests."""
    for item in items:
        if "/controllers/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'catalog.db'}", timeout=5)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return ProductRepository(session_factory)


@pytest.fixture
def category_repository(session_factory):
    return CategoryRepository(session_factory)


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def make_product():
    def _make_product(product_id, title=None, price=10, category="misc", **overrides):
        data = {
            "id": product_id,
            "title": title or f"Product {product_id}",
            "description": "",
            "category": category,
            "price": price,
            "stock": 5,
        }
        data.update(overrides)
        return ProductSchema(**data)

    return _make_product


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def verifier():
    return StaticTokenVerifier(TOKENS)


@pytest.fixture
def app(engine, verifier):
    config = Settings(DATABASE_URL="sqlite://", CACHE_ENABLED=False, CONFLICT_RETRY_BACKOFF_SECONDS=0)
    return create_fastapi_app(
        config=config,
        engine=engine,
        identity_verifier=verifier,
        cache_service=CacheService(),
    )


@pytest.fixture
def client(app):
    return TestClient(app)


def auth(token="token-alice"):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return auth
