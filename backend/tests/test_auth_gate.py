"""Unit tests for the auth gate state machine."""

from typing import Optional

import pytest
import pytest_asyncio
from starlette.requests import Request

from fisiohub.core.errors import (
    ForbiddenError,
    TenantMismatchError,
    TenantNotFoundError,
    UnauthenticatedError,
)
from fisiohub.core.security import TokenService, TokenType
from fisiohub.models.user import UserRole
from fisiohub.services.auth_gate import AuthGate, GateState, extract_bearer_token
from fisiohub.services.identity_store import IdentityStore
from fisiohub.services.tenant_resolver import TenantResolver


def make_request(tenant_key: Optional[str], token: Optional[str] = None) -> Request:
    headers = [(b"host", b"localhost")]
    if tenant_key is not None:
        headers.append((b"x-tenant-slug", tenant_key.encode()))
    if token is not None:
        headers.append((b"authorization", f"Bearer {token}".encode()))
    return Request(
        {"type": "http", "method": "GET", "path": "/api/patients", "headers": headers, "query_string": b""}
    )


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret_key="gate-secret")


@pytest_asyncio.fixture
async def store(db_session) -> IdentityStore:
    return IdentityStore(db_session)


@pytest_asyncio.fixture
async def members(store):
    alpha = await store.create_tenant(name="Alpha", slug="alpha")
    beta = await store.create_tenant(name="Beta", slug="beta")
    admin = await store.create_user(
        tenant_id=alpha.id, email="admin@alpha.com", password_hash="x", full_name="Admin", role=UserRole.ADMIN
    )
    receptionist = await store.create_user(
        tenant_id=alpha.id, email="desk@alpha.com", password_hash="x", full_name="Desk", role=UserRole.RECEPTIONIST
    )
    return alpha, beta, admin, receptionist


@pytest.fixture
def gate(store, tokens) -> AuthGate:
    return AuthGate(TenantResolver(store), tokens, store)


@pytest.mark.parametrize(
    "header, token",
    [("Bearer abc", "abc"), ("bearer  abc ", "abc"), ("BEARER x.y.z", "x.y.z")],
)
def test_extract_bearer_token(header, token):
    assert extract_bearer_token(header) == token


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer a b"])
def test_extract_bearer_token_rejects(header):
    with pytest.raises(UnauthenticatedError):
        extract_bearer_token(header)


@pytest.mark.security
async def test_gate_authorizes_member(gate, tokens, members):
    alpha, _, admin, _ = members
    request = make_request("alpha", tokens.issue(admin))

    access = await gate.authorize(request, "patients:delete")

    assert gate.state == GateState.AUTHORIZED
    assert access.tenant_id == alpha.id
    assert access.user_id == admin.id
    assert request.state.access is access


@pytest.mark.security
async def test_gate_rejects_unknown_tenant_first(gate, tokens, members):
    _, _, admin, _ = members

    with pytest.raises(TenantNotFoundError):
        await gate.authorize(make_request("nobody", tokens.issue(admin)))
    assert gate.state == GateState.REJECTED


@pytest.mark.security
async def test_gate_rejects_missing_token(gate, members):
    with pytest.raises(UnauthenticatedError):
        await gate.authorize(make_request("alpha"))
    assert gate.state == GateState.REJECTED


@pytest.mark.security
@pytest.mark.tenancy
async def test_gate_rejects_foreign_identity(gate, tokens, members):
    _, _, admin, _ = members

    with pytest.raises(TenantMismatchError):
        await gate.authorize(make_request("beta", tokens.issue(admin)))
    assert gate.state == GateState.REJECTED


@pytest.mark.security
async def test_gate_rejects_missing_capability(gate, tokens, members):
    _, _, _, receptionist = members

    with pytest.raises(ForbiddenError):
        await gate.authorize(make_request("alpha", tokens.issue(receptionist)), "evolutions:write")
    assert gate.state == GateState.REJECTED


@pytest.mark.security
async def test_gate_rejects_refresh_token(gate, tokens, members):
    _, _, admin, _ = members

    with pytest.raises(UnauthenticatedError):
        await gate.authorize(make_request("alpha", tokens.issue(admin, TokenType.REFRESH)))


@pytest.mark.tenancy
async def test_gate_takes_tenant_from_token_when_request_names_none(gate, tokens, members):
    alpha, _, admin, _ = members

    access = await gate.authorize(make_request(None, tokens.issue(admin)), tenant_from_token=True)

    assert gate.state == GateState.AUTHORIZED
    assert access.tenant_id == alpha.id


@pytest.mark.security
@pytest.mark.tenancy
async def test_gate_token_fallback_still_checks_named_tenant(gate, tokens, members):
    _, _, admin, _ = members

    with pytest.raises(TenantMismatchError):
        await gate.authorize(make_request("beta", tokens.issue(admin)), tenant_from_token=True)
    assert gate.state == GateState.REJECTED


@pytest.mark.security
async def test_gate_without_tenant_or_fallback_is_not_found(gate, tokens, members):
    _, _, admin, _ = members

    with pytest.raises(TenantNotFoundError):
        await gate.authorize(make_request(None, tokens.issue(admin)))
