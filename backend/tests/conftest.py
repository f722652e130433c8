"""Pytest configuration and fixtures for FisioHub tests."""

from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional
from uuid import UUID

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from fisiohub.core.config import Settings
from fisiohub.core.database import Database
from fisiohub.main import create_app

DEFAULT_PASSWORD = "pw123"


# ============================================================================
# Application and Database Fixtures
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings for an isolated in-memory database."""
    return Settings(
        APP_ENV="testing",
        SECRET_KEY="test-secret-key-not-for-production",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        PASSWORD_BCRYPT_ROUNDS=4,
        TENANT_RESERVED_SUBDOMAINS=["www", "api"],
    )


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    """Fresh schema per test."""
    db = Database.from_settings(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture
def app(test_settings, database) -> FastAPI:
    application = create_app(test_settings)
    application.state.database = database
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================================================
# Tenant Session Helpers
# ============================================================================

@dataclass
class TenantLogin:
    """A logged-in user of a tenant, addressed through the tenant header."""

    slug: str
    tenant_id: UUID
    user_id: UUID
    email: str
    access_token: str
    refresh_token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}", "X-Tenant-Slug": self.slug}


def _login_from(slug: str, body: dict[str, Any]) -> TenantLogin:
    return TenantLogin(
        slug=slug,
        tenant_id=UUID(body["tenant"]["id"]),
        user_id=UUID(body["user"]["id"]),
        email=body["user"]["email"],
        access_token=body["access_token"],
        refresh_token=body["refresh_token"],
    )


async def register_tenant(
    client: AsyncClient,
    slug: str,
    admin_email: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
    **extra: Any,
) -> TenantLogin:
    """Register a tenant and return its admin's session."""
    payload = {
        "name": extra.pop("name", f"Clinic {slug}"),
        "slug": slug,
        "admin_name": "Admin User",
        "admin_email": admin_email or f"admin@{slug}.com",
        "admin_password": password,
        **extra,
    }
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return _login_from(slug, response.json())


async def login(client: AsyncClient, slug: str, email: str, password: str = DEFAULT_PASSWORD) -> TenantLogin:
    response = await client.post(
        "/api/auth/login",
        json={"email": email, "password": password},
        headers={"X-Tenant-Slug": slug},
    )
    assert response.status_code == 200, response.text
    return _login_from(slug, response.json())


async def add_user(
    client: AsyncClient,
    admin: TenantLogin,
    role: str,
    email: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
) -> TenantLogin:
    """Create a user with ``role`` in the admin's tenant and log them in."""
    email = email or f"{role}@{admin.slug}.com"
    response = await client.post(
        "/api/users",
        json={"email": email, "password": password, "full_name": f"{role.title()} User", "role": role},
        headers=admin.headers,
    )
    assert response.status_code == 201, response.text
    return await login(client, admin.slug, email, password)


async def create_patient(client: AsyncClient, session: TenantLogin, **fields: Any) -> dict[str, Any]:
    payload = {"full_name": "Maria Souza", **fields}
    response = await client.post("/api/patients", json=payload, headers=session.headers)
    assert response.status_code == 201, response.text
    return response.json()


async def create_appointment(
    client: AsyncClient, session: TenantLogin, patient_id: str, scheduled_at: str, **fields: Any
) -> dict[str, Any]:
    payload = {"patient_id": patient_id, "scheduled_at": scheduled_at, **fields}
    response = await client.post("/api/appointments", json=payload, headers=session.headers)
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# Tenant Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def clinic_a(client) -> TenantLogin:
    """Tenant ``clinic-a`` with admin a@x.com / pw123."""
    return await register_tenant(client, "clinic-a", admin_email="a@x.com")


@pytest_asyncio.fixture
async def clinic_b(client) -> TenantLogin:
    """Tenant ``clinic-b`` with admin b@x.com / pw123."""
    return await register_tenant(client, "clinic-b", admin_email="b@x.com")


@pytest_asyncio.fixture
async def patient_a(client, clinic_a) -> dict[str, Any]:
    return await create_patient(client, clinic_a, full_name="Ana Lima", document="11122233344")
