import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_pokedex.db")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SEED_MAX_WORKERS", "4")

from pokedex_api.config import get_settings  # noqa: E402
from pokedex_api.database import SessionLocal, engine  # noqa: E402
from pokedex_api.main import create_app  # noqa: E402
from pokedex_api.models.base import Base  # noqa: E402
from pokedex_api.services.rate_limit import FixedWindowRateLimiter  # noqa: E402
from pokedex_api.services.schema import SchemaCapabilities  # noqa: E402
from tests.helpers import ADMIN_KEY, FakeCatalog  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    get_settings.cache_clear()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def catalog():
    return FakeCatalog.with_roster(12)


@pytest.fixture()
def rate_limiter():
    return FixedWindowRateLimiter(3, 60)


@pytest.fixture()
def client(catalog, rate_limiter):
    app = create_app(catalog=catalog, refresh_rate_limiter=rate_limiter)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def admin_headers():
    return {"x-admin-key": ADMIN_KEY}


@pytest.fixture()
def db_session():
    with SessionLocal() as db:
        yield db
        db.rollback()


@pytest.fixture()
def capabilities():
    return SchemaCapabilities(custom_metadata=True)
