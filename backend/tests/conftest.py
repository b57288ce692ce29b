"""
Test configuration and fixtures for ChurchLedger backend tests.
"""
import os

# Point the application at SQLite before churchledger.db.base builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DEBUG", "false")

import pytest
import pytest_asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from churchledger.main import app
from churchledger.db.base import Base, get_db
from churchledger.core.security import create_access_token
from churchledger.core.tenancy import TenantSession
from churchledger.models.user import User
from churchledger.models.church import Church
from churchledger.models.church_membership import ChurchMembership, ChurchRole
from churchledger.models.member import Member
from churchledger.models.base import generate_id
from churchledger.schemas.transaction import EntryRecord, ExpenseRecord
from churchledger.services.feed import TransactionFeed
from churchledger.services.transaction_store import TransactionStore


# File-based SQLite: with aiosqlite each new connection to :memory: would
# see an empty database.
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    try:
        os.remove("./test.db")
    except OSError:
        pass


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# Fixtures commit so that a rolled-back unit of work under test leaves them in place.

@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        email="tesoureiro@example.com",
        name="Test Treasurer",
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def test_user_token(test_user: User) -> str:
    return create_access_token(subject=test_user.id)


@pytest_asyncio.fixture
async def auth_headers(test_user_token: str) -> dict:
    return {"Authorization": f"Bearer {test_user_token}"}


@pytest_asyncio.fixture
async def test_church(db_session: AsyncSession, test_user: User) -> Church:
    """Create a church owned by the test user."""
    church = Church(name="Igreja Teste", description="Church used in tests", currency="BRL")
    db_session.add(church)
    await db_session.flush()

    membership = ChurchMembership(
        church_id=church.id,
        user_id=test_user.id,
        role=ChurchRole.OWNER,
        is_active=True,
        joined_at=datetime.now(timezone.utc),
    )
    db_session.add(membership)
    await db_session.commit()
    return church


@pytest_asyncio.fixture
async def viewer_headers(db_session: AsyncSession, test_church: Church) -> dict:
    """Auth headers of a user who may only read the test church."""
    viewer = User(email="viewer@example.com", name="Viewer", is_active=True)
    db_session.add(viewer)
    await db_session.flush()
    db_session.add(ChurchMembership(
        church_id=test_church.id,
        user_id=viewer.id,
        role=ChurchRole.VIEWER,
        is_active=True,
    ))
    await db_session.commit()
    return {"Authorization": f"Bearer {create_access_token(subject=viewer.id)}"}


@pytest_asyncio.fixture
async def test_member(db_session: AsyncSession, test_church: Church) -> Member:
    member = Member(church_id=test_church.id, name="João Silva", is_tither=True, is_baptized=True)
    db_session.add(member)
    await db_session.commit()
    return member


@pytest_asyncio.fixture
async def other_member(db_session: AsyncSession, test_church: Church) -> Member:
    member = Member(church_id=test_church.id, name="Maria Souza", is_tither=True)
    db_session.add(member)
    await db_session.commit()
    return member


@pytest.fixture
def tenant_session(test_church: Church, test_user: User) -> TenantSession:
    return TenantSession(church_id=test_church.id, user_id=test_user.id, role=ChurchRole.OWNER)


@pytest.fixture
def feed() -> TransactionFeed:
    return TransactionFeed()


@pytest.fixture
def store(db_session: AsyncSession, tenant_session: TenantSession, feed: TransactionFeed) -> TransactionStore:
    return TransactionStore(db_session, tenant_session.church_id, tenant_session, feed=feed)


def make_entry(amount, category="Dízimo", occurred_at=None, **fields) -> EntryRecord:
    """Build a decoded entry without touching the database."""
    now = datetime.now(timezone.utc)
    return EntryRecord(
        id=fields.pop("id", generate_id()),
        church_id="church",
        amount=Decimal(str(amount)),
        occurred_at=occurred_at or now,
        settled=True,
        category=category,
        payment_method=fields.pop("payment_method", "PIX"),
        version=1,
        created=now,
        updated=now,
        **fields,
    )


def make_expense(amount, category="Outra Saída", occurred_at=None, **fields) -> ExpenseRecord:
    now = datetime.now(timezone.utc)
    return ExpenseRecord(
        id=fields.pop("id", generate_id()),
        church_id="church",
        amount=Decimal(str(amount)),
        occurred_at=occurred_at or now,
        settled=True,
        category=category,
        version=1,
        created=now,
        updated=now,
        **fields,
    )
