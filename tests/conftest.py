"""
Fixtures compartilhadas: banco em memória, app com get_db substituído,
fábricas de igreja/membro e tokens do provedor de autenticação.
"""
import uuid

import pytest
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from connect_vida.main import app
from connect_vida.core.config import settings
from connect_vida.core.rate_limit import limiter
from connect_vida.database import Base, get_db
from connect_vida.models import Church, Member, MemberStatus, SubscriptionPlan

TEST_DB_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


def make_token(member_id: str, email: str = "user@example.com") -> str:
    return jwt.encode(
        {"sub": member_id, "email": email},
        settings.AUTH_JWT_SECRET,
        algorithm=settings.AUTH_JWT_ALGORITHM,
    )


def auth_headers(member_or_id) -> dict:
    member_id = member_or_id if isinstance(member_or_id, str) else member_or_id.id
    return {"Authorization": f"Bearer {make_token(member_id)}"}


@pytest.fixture
def create_church(session_factory):
    async def _create(**overrides) -> Church:
        values = {
            "name": "Igreja Teste",
            "status": "active",
            "member_limit": None,
            "current_members": 0,
            "payment_history": [],
            "last_payment_status": "N/A",
        }
        values.update(overrides)
        async with session_factory() as session:
            church = Church(**values)
            session.add(church)
            await session.commit()
            return church
    return _create


@pytest.fixture
def create_member(session_factory):
    async def _create(church: Church, role: str = "membro", status: str = MemberStatus.ACTIVE.value, **overrides) -> Member:
        member_id = overrides.pop("id", None) or str(uuid.uuid4())
        values = {
            "full_name": f"Membro {member_id[:6]}",
            "email": f"{member_id[:8]}@example.com",
        }
        values.update(overrides)
        async with session_factory() as session:
            member = Member(id=member_id, church_id=church.id, role=role, status=status, **values)
            session.add(member)
            await session.commit()
            return member
    return _create


@pytest.fixture
def create_plan(session_factory):
    async def _create(**overrides) -> SubscriptionPlan:
        values = {"name": f"Plano {uuid.uuid4().hex[:6]}", "monthly_price": 49.90, "member_limit": 100, "is_active": True}
        values.update(overrides)
        async with session_factory() as session:
            plan = SubscriptionPlan(**values)
            session.add(plan)
            await session.commit()
            return plan
    return _create


@pytest.fixture
async def church(create_church):
    return await create_church()


@pytest.fixture
async def admin(church, create_member):
    return await create_member(church, role="admin", full_name="Pastor Admin", email="admin@igreja.com")
