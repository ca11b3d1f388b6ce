"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import MagicMock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from src.models.filters import Purpose, PropertyType
from src.models.property import Property
from src.models.user_context import Role, UserContext
from src.services.filter_canonicalizer import clear_cache
from src.services.property_store import InMemoryPropertyStore
from tests.utils.factories import create_property


@pytest.fixture(autouse=True)
def _clear_filter_cache():
    """Memoized canonical filters must not leak between tests."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def mock_supabase_client():
    """Supabase client whose query builder returns itself for every chained call."""
    builder = MagicMock()
    for method in ("select", "eq", "ilike", "or_", "gte", "order", "range", "limit", "update", "delete", "insert"):
        getattr(builder, method).return_value = builder
    builder.execute.return_value = MagicMock(data=[], count=0)

    client = MagicMock()
    client.table.return_value = builder
    client.builder = builder
    return client


@pytest.fixture
def sample_properties() -> list[Property]:
    """A small, fully specified catalogue across purposes and cities."""
    return [
        create_property(
            id="p-casa-aluguel", purpose=Purpose.RENTAL, type=PropertyType.HOUSE,
            city="Barreiras", neighborhood="Centro", bedrooms=3, bathrooms=2, suites=1,
            parking_spots=2, rent=2000, created_at="2024-12-01T10:00:00+00:00",
        ),
        create_property(
            id="p-apto-aluguel", purpose=Purpose.RENTAL, type=PropertyType.APARTMENT,
            city="Barreiras", neighborhood="Vila Brasil", bedrooms=2, bathrooms=1, suites=0,
            parking_spots=1, rent=1200, created_at="2024-12-03T10:00:00+00:00",
        ),
        create_property(
            id="p-casa-venda", purpose=Purpose.SALE, type=PropertyType.HOUSE,
            city="Barreiras", neighborhood="Morada Nobre", bedrooms=4, bathrooms=3, suites=2,
            parking_spots=3, price=500000, created_at="2024-12-02T10:00:00+00:00",
        ),
        create_property(
            id="p-terreno-venda", purpose=Purpose.SALE, type=PropertyType.LAND,
            city="Luís Eduardo Magalhães", neighborhood="Jardim Paraíso", bedrooms=None,
            bathrooms=None, suites=None, parking_spots=None, price=100000,
            created_at="2024-11-20T10:00:00+00:00",
        ),
        create_property(
            id="p-lancamento", purpose=Purpose.NEW_DEVELOPMENT, type=PropertyType.APARTMENT,
            city="Vitória da Conquista", neighborhood="Candeias", bedrooms=3, bathrooms=2,
            suites=1, parking_spots=2, price=None, created_at="2024-12-05T10:00:00+00:00",
        ),
    ]


@pytest.fixture
def memory_store(sample_properties) -> InMemoryPropertyStore:
    return InMemoryPropertyStore(sample_properties)


@pytest.fixture
def broker_context() -> UserContext:
    return UserContext(user_id="8f14e45f-ceea-467f-a8f5-5d5c2e7e1a01", email="corretor@example.com", role=Role.BROKER)


@pytest.fixture
def anonymous_context() -> UserContext:
    return UserContext()


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
