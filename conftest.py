import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Load .env.test for local overrides (e.g. TEST_DATABASE_URL pointing at Postgres)
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

# Order submission is rate limited; tests submit far more than a human would
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from libs.common.config import get_settings  # noqa: E402
from libs.db.base import Base  # noqa: E402
from services.shop_service import models as _shop_models  # noqa: E402,F401
from services.shop_service.app.main import app  # noqa: E402
from tests.factories import CustomerFactory, bearer  # noqa: E402

# Clear cached settings to reload with new env vars
get_settings.cache_clear()
settings = get_settings()

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine(url: str):
    if not url.startswith("sqlite"):
        return create_async_engine(url)

    engine = create_async_engine(
        url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; take over BEGIN
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


@pytest_asyncio.fixture
async def test_engine():
    """
    Engine for TEST_DATABASE_URL (in-memory SQLite unless overridden).
    Tables are created per test and dropped afterwards.
    """
    engine = _make_engine(TEST_DATABASE_URL)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except OperationalError:
        await engine.dispose()
        pytest.skip("Database not available for tests")

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session that rolls back after the test.
    We use join_transaction_mode="create_savepoint" so the code under test can
    commit and roll back as if it owned the session, while everything runs
    inside an outer transaction that is discarded at the end.
    """
    connection = await test_engine.connect()
    transaction = await connection.begin()

    session_factory = async_sessionmaker(
        bind=connection,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()
        await transaction.rollback()
        await connection.close()


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the app with the DB dependency overridden.
    """
    from libs.db.session import get_async_db

    app.dependency_overrides[get_async_db] = lambda: db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def customer(db_session):
    c = CustomerFactory.create(name="Aidos", car_brand="Toyota Camry")
    db_session.add(c)
    await db_session.commit()
    return c


@pytest_asyncio.fixture
async def admin(db_session):
    a = CustomerFactory.create(name="Admin", is_admin=True)
    db_session.add(a)
    await db_session.commit()
    return a


@pytest.fixture
def auth_headers(customer) -> dict:
    """Bearer headers for the plain ``customer`` fixture."""
    return bearer(customer.id)


@pytest.fixture
def admin_headers(admin) -> dict:
    """Bearer headers for the ``admin`` fixture."""
    return bearer(admin.id, is_admin=True)
