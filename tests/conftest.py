"""
Test configuration for pytest
"""

import os

# Test environment variables (read when the settings are first built)
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["REQUIRE_VERIFIED_IDENTITY"] = "false"
os.environ.pop("RESEND_API_KEY", None)

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import Optional
import uuid

import app.models  # noqa: F401
from app.core.database import get_session
from app.core.permissions import ensure_permission_catalog
from app.main import app as fastapi_app
from app.models.permission import RolePermission
from app.models.tenant import Tenant
from app.models.user import Membership, MembershipRole, User


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    """Session used by tests to arrange and inspect data"""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    """HTTP client against the app, bound to the test database"""

    async def override_get_session():
        async with session_maker() as session:
            yield session

    fastapi_app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def catalog(db):
    """Seeded permission catalog"""
    return await ensure_permission_catalog(db)


class Member:
    """A user with a membership, plus the headers that identify it"""

    def __init__(self, tenant: Tenant, user: User, membership: Membership):
        self.tenant = tenant
        self.user = user
        self.membership = membership

    @property
    def headers(self) -> dict:
        return {
            "X-Tenant-Id": str(self.tenant.id),
            "X-User-Sub": self.user.auth_provider_id,
            "X-User-Email": self.user.email,
        }


@pytest.fixture
def make_tenant(db):
    async def _make_tenant(name: str = "Acme SRL", slug: Optional[str] = None) -> Tenant:
        tenant = Tenant(name=name, slug=slug or f"acme-{uuid.uuid4().hex[:8]}")
        db.add(tenant)
        await db.commit()
        return tenant

    return _make_tenant


@pytest.fixture
def make_member(db, make_tenant):
    async def _make_member(
        tenant: Optional[Tenant] = None,
        role: MembershipRole = MembershipRole.OWNER,
        email: Optional[str] = None,
    ) -> Member:
        if tenant is None:
            tenant = await make_tenant()
        sub = f"auth0|{uuid.uuid4().hex[:12]}"
        user = User(auth_provider_id=sub, email=email or f"{sub[6:]}@example.com", name="Test User")
        db.add(user)
        await db.flush()
        membership = Membership(user_id=user.id, tenant_id=tenant.id, role=role)
        db.add(membership)
        await db.commit()
        return Member(tenant, user, membership)

    return _make_member


@pytest.fixture
def grant(db, catalog):
    async def _grant(tenant_id: int, role: MembershipRole, key: str) -> RolePermission:
        resource, action = key.split(":", 1)
        permission = next(p for p in catalog if p.resource == resource and p.action == action)
        row = RolePermission(tenant_id=tenant_id, role=role.value, permission_id=permission.id)
        db.add(row)
        await db.commit()
        return row

    return _grant


@pytest_asyncio.fixture
async def owner(make_member, catalog) -> Member:
    return await make_member(role=MembershipRole.OWNER)
