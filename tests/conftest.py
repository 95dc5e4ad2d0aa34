import os
import tempfile
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

# Keep the module-level engine away from the working directory
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "bookstore_test.db"),
)

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from bookstore import models  # noqa: F401  registers all tables
from bookstore.database import Base, get_db
from bookstore.main import app
from bookstore.models import Book, Promotion, Rule, DEFAULT_RULES
from bookstore import config
from bookstore.core import dates
from bookstore.core.dates import store_today


# ==================== Builders ====================

@pytest.fixture
def today() -> date:
    return date(2024, 6, 15)


@pytest.fixture
def make_promotion(today):
    """Build a transient Promotion; defaults describe a valid 10% code."""
    def _make(**overrides):
        book_ids = overrides.pop("book_ids", [])
        values = {
            "id": 1,
            "promotion_code": "KM01",
            "name": "Khuyến mãi hè",
            "type": "percent",
            "discount_value": Decimal("10"),
            "start_date": today - timedelta(days=5),
            "end_date": today + timedelta(days=5),
            "min_price": Decimal("200000"),
            "quantity": 100,
            "used_quantity": 0,
        }
        values.update(overrides)
        promotion = Promotion(**values)
        promotion.books = [Book(id=book_id, title=f"Book {book_id}") for book_id in book_ids]
        return promotion
    return _make


@pytest.fixture
def default_rule() -> Rule:
    return Rule(id=1, **DEFAULT_RULES)


# ==================== Database ====================

@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seeded(session_factory):
    """Rules row plus three books."""
    async with session_factory() as session:
        session.add(Rule(id=1, **DEFAULT_RULES))
        session.add_all([
            Book(id=1, title="Dế Mèn phiêu lưu ký", author="Tô Hoài", price=Decimal("50000")),
            Book(id=2, title="Số đỏ", author="Vũ Trọng Phụng", price=Decimal("80000")),
            Book(id=3, title="Tắt đèn", author="Ngô Tất Tố", price=Decimal("65000")),
        ])
        await session.commit()
    return session_factory


@pytest.fixture
async def db(seeded):
    async with seeded() as session:
        yield session


@pytest.fixture
async def client(seeded):
    async def override_get_db():
        async with seeded() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def store_date() -> date:
    """Today as the API sees it."""
    return store_today()


# ==================== Clock ====================

class FrozenDatetime(datetime):
    """now() is 2024-02-29 23:00 UTC, i.e. 06:00 on 2024-03-01 in Ho Chi Minh City."""

    @classmethod
    def now(cls, tz=None):
        instant = datetime(2024, 2, 29, 23, 0, tzinfo=timezone.utc)
        return instant.astimezone(tz) if tz is not None else instant.replace(tzinfo=None)


@pytest.fixture
def frozen_clock(monkeypatch):
    monkeypatch.setattr(config.settings, "STORE_TIMEZONE", "Asia/Ho_Chi_Minh")
    monkeypatch.setattr(dates, "datetime", FrozenDatetime)
