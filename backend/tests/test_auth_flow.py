"""End-to-end tests for registration, login and the auth gate."""

import pytest
from sqlalchemy import event

from tests.conftest import DEFAULT_PASSWORD, add_user, login, register_tenant


# ============================================================================
# Registration
# ============================================================================

async def test_register_returns_admin_session(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "Clinic Alpha",
            "slug": "alpha",
            "subdomain": "alpha-rehab",
            "admin_name": "Alice Admin",
            "admin_email": "Alice@Alpha.com",
            "admin_password": DEFAULT_PASSWORD,
        },
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0
    assert body["user"]["role"] == "admin"
    assert body["user"]["email"] == "alice@alpha.com"
    assert "password_hash" not in body["user"]
    assert body["tenant"]["slug"] == "alpha"
    assert body["tenant"]["status"] == "trial"
    assert body["tenant"]["trial_ends_at"] is not None


async def test_register_via_tenants_route(client):
    response = await client.post(
        "/api/tenants/register",
        json={
            "name": "Clinic Beta",
            "slug": "beta",
            "admin_name": "Bob Admin",
            "admin_email": "bob@beta.com",
            "admin_password": DEFAULT_PASSWORD,
        },
    )
    assert response.status_code == 201, response.text


@pytest.mark.tenancy
async def test_duplicate_slug_conflicts(client, clinic_a):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "Copycat",
            "slug": "clinic-a",
            "admin_name": "Eve",
            "admin_email": "eve@x.com",
            "admin_password": DEFAULT_PASSWORD,
        },
    )

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


@pytest.mark.tenancy
async def test_subdomain_equal_to_existing_slug_conflicts(client, clinic_a):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "Shadow",
            "slug": "shadow",
            "subdomain": "clinic-a",
            "admin_name": "Eve",
            "admin_email": "eve@x.com",
            "admin_password": DEFAULT_PASSWORD,
        },
    )
    assert response.status_code == 409


async def test_register_rejects_invalid_slug(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "Bad",
            "slug": "Not A Slug",
            "admin_name": "Eve",
            "admin_email": "eve@x.com",
            "admin_password": DEFAULT_PASSWORD,
        },
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert any("slug" in error["loc"] for error in body["errors"])


@pytest.mark.tenancy
async def test_register_with_custom_domain_resolves_by_host(client):
    session = await register_tenant(client, "clinic-c", custom_domain="fisio.example.com")

    response = await client.get(
        "/api/auth/me",
        headers={"Authorization": f"Bearer {session.access_token}", "Host": "fisio.example.com"},
    )

    assert response.status_code == 200, response.text
    assert response.json()["tenant"]["slug"] == "clinic-c"
    assert response.json()["tenant"]["custom_domain"] == "fisio.example.com"


@pytest.mark.parametrize("custom_domain", ["localhost", "not a domain", "a.b"])
async def test_register_rejects_invalid_custom_domain(client, custom_domain):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "Bad Domain",
            "slug": "bad-domain",
            "custom_domain": custom_domain,
            "admin_name": "Eve",
            "admin_email": "eve@x.com",
            "admin_password": DEFAULT_PASSWORD,
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.security
async def test_register_rejects_password_over_72_bytes(client):
    """The limit counts UTF-8 bytes: 37 two-byte characters are too many."""
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "Long Password",
            "slug": "long-password",
            "admin_name": "Eve",
            "admin_email": "eve@x.com",
            "admin_password": "\u00e9" * 37,
        },
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert any("admin_password" in error["loc"] for error in body["errors"])


@pytest.mark.security
async def test_multibyte_password_at_72_bytes_logs_in(client):
    password = "\u00e9" * 36
    await register_tenant(client, "clinic-e", admin_email="e@x.com", password=password)

    session = await login(client, "clinic-e", "e@x.com", password)

    assert session.slug == "clinic-e"


# ============================================================================
# Login / Refresh / Me
# ============================================================================

async def test_login_then_me(client, clinic_a):
    session = await login(client, "clinic-a", "a@x.com")

    response = await client.get("/api/auth/me", headers=session.headers)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["email"] == "a@x.com"
    assert body["role"] == "admin"
    assert body["tenant_id"] == str(clinic_a.tenant_id)
    assert body["tenant"]["slug"] == "clinic-a"


async def test_login_email_is_case_insensitive(client, clinic_a):
    session = await login(client, "clinic-a", "A@X.COM")
    assert session.user_id == clinic_a.user_id


@pytest.mark.security
async def test_login_failures_are_indistinguishable(client, clinic_a):
    """Unknown email and wrong password give the same answer."""
    wrong_password = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": "nope"},
        headers={"X-Tenant-Slug": "clinic-a"},
    )
    unknown_email = await client.post(
        "/api/auth/login",
        json={"email": "ghost@x.com", "password": DEFAULT_PASSWORD},
        headers={"X-Tenant-Slug": "clinic-a"},
    )

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.headers["www-authenticate"] == "Bearer"


@pytest.mark.tenancy
async def test_login_is_scoped_to_resolved_tenant(client, clinic_a, clinic_b):
    """Clinic A's credentials do not work on clinic B."""
    response = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": DEFAULT_PASSWORD},
        headers={"X-Tenant-Slug": "clinic-b"},
    )
    assert response.status_code == 401


@pytest.mark.tenancy
async def test_login_without_tenant_signal(client, clinic_a):
    response = await client.post("/api/auth/login", json={"email": "a@x.com", "password": DEFAULT_PASSWORD})

    assert response.status_code == 404
    assert response.json()["code"] == "TENANT_NOT_FOUND"


@pytest.mark.tenancy
@pytest.mark.parametrize("field", ["tenantSlug", "tenant_slug"])
async def test_login_with_tenant_slug_in_body(client, clinic_a, field):
    response = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": DEFAULT_PASSWORD, field: "clinic-a"},
    )

    assert response.status_code == 200, response.text
    assert response.json()["tenant"]["slug"] == "clinic-a"


@pytest.mark.tenancy
async def test_request_signal_wins_over_body_slug(client, clinic_a, clinic_b):
    """Clinic A's credentials with clinic-a in the body still land on clinic B."""
    response = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": DEFAULT_PASSWORD, "tenantSlug": "clinic-a"},
        headers={"X-Tenant-Slug": "clinic-b"},
    )
    assert response.status_code == 401


@pytest.mark.tenancy
async def test_login_with_unknown_body_slug(client, clinic_a):
    response = await client.post(
        "/api/auth/login",
        json={"email": "a@x.com", "password": DEFAULT_PASSWORD, "tenantSlug": "nobody"},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "TENANT_NOT_FOUND"


async def test_login_records_last_login(client, clinic_a):
    session = await login(client, "clinic-a", "a@x.com")
    response = await client.get(f"/api/users/{session.user_id}", headers=session.headers)
    assert response.json()["last_login_at"] is not None


async def test_refresh_issues_new_pair(client, clinic_a):
    response = await client.post(
        "/api/auth/refresh",
        json={"refresh_token": clinic_a.refresh_token},
        headers={"X-Tenant-Slug": "clinic-a"},
    )

    assert response.status_code == 200, response.text
    me = await client.get(
        "/api/auth/me",
        headers={"Authorization": f"Bearer {response.json()['access_token']}", "X-Tenant-Slug": "clinic-a"},
    )
    assert me.status_code == 200


@pytest.mark.security
async def test_access_token_cannot_refresh(client, clinic_a):
    response = await client.post(
        "/api/auth/refresh",
        json={"refresh_token": clinic_a.access_token},
        headers={"X-Tenant-Slug": "clinic-a"},
    )
    assert response.status_code == 401


@pytest.mark.security
async def test_refresh_token_cannot_authenticate(client, clinic_a):
    response = await client.get(
        "/api/auth/me",
        headers={"Authorization": f"Bearer {clinic_a.refresh_token}", "X-Tenant-Slug": "clinic-a"},
    )
    assert response.status_code == 401


@pytest.mark.tenancy
async def test_refresh_on_other_tenant_is_mismatch(client, clinic_a, clinic_b):
    response = await client.post(
        "/api/auth/refresh",
        json={"refresh_token": clinic_a.refresh_token},
        headers={"X-Tenant-Slug": "clinic-b"},
    )

    assert response.status_code == 401
    assert response.json()["code"] == "TENANT_MISMATCH"


async def test_refresh_with_tenant_slug_in_body(client, clinic_a):
    response = await client.post(
        "/api/auth/refresh",
        json={"refresh_token": clinic_a.refresh_token, "tenantSlug": "clinic-a"},
    )

    assert response.status_code == 200, response.text
    assert response.json()["user"]["id"] == str(clinic_a.user_id)


async def test_logout_acknowledges(client, clinic_a):
    response = await client.post("/api/auth/logout", headers=clinic_a.headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out"}


async def test_path_addressing(client, clinic_a):
    """The /api/t/<slug> mount resolves the tenant from the path."""
    response = await client.get(
        "/api/t/clinic-a/auth/me",
        headers={"Authorization": f"Bearer {clinic_a.access_token}"},
    )

    assert response.status_code == 200, response.text
    assert response.json()["tenant"]["slug"] == "clinic-a"


async def test_me_with_bearer_token_only(client, clinic_a):
    """Without any tenant signal the token's own tenant answers."""
    response = await client.get(
        "/api/auth/me",
        headers={"Authorization": f"Bearer {clinic_a.access_token}"},
    )

    assert response.status_code == 200, response.text
    assert response.json()["tenant_id"] == str(clinic_a.tenant_id)


@pytest.mark.security
async def test_me_without_token_or_tenant(client, clinic_a):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


# ============================================================================
# Gate Rejections
# ============================================================================

@pytest.mark.security
@pytest.mark.parametrize(
    "authorization",
    [None, "Token abc", "Bearer", "Bearer a b", "Bearer not-a-jwt"],
)
async def test_missing_or_malformed_token_rejected(client, clinic_a, authorization):
    headers = {"X-Tenant-Slug": "clinic-a"}
    if authorization is not None:
        headers["Authorization"] = authorization

    response = await client.get("/api/patients", headers=headers)

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


@pytest.mark.security
@pytest.mark.tenancy
async def test_cross_tenant_token_rejected_before_any_data_access(client, database, clinic_a, clinic_b):
    """
    A clinic-a token presented on clinic-b's host is refused with
    TENANT_MISMATCH, and no patient query ever reaches the database.
    """
    session = await login(client, "clinic-a", "a@x.com")

    statements: list[str] = []

    def capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(database.engine.sync_engine, "before_cursor_execute", capture)
    try:
        response = await client.get(
            "/api/patients",
            headers={"Authorization": f"Bearer {session.access_token}", "Host": "clinic-b.fisiohub.com"},
        )
    finally:
        event.remove(database.engine.sync_engine, "before_cursor_execute", capture)

    assert response.status_code == 401
    assert response.json()["code"] == "TENANT_MISMATCH"
    assert statements, "Expected tenant and user lookups"
    assert not any("FROM patients" in s for s in statements), "Patient data was queried"


@pytest.mark.security
async def test_deactivated_user_token_stops_working(client, clinic_a):
    therapist = await add_user(client, clinic_a, "therapist")

    response = await client.delete(f"/api/users/{therapist.user_id}", headers=clinic_a.headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    me = await client.get("/api/auth/me", headers=therapist.headers)
    assert me.status_code == 401

    relogin = await client.post(
        "/api/auth/login",
        json={"email": therapist.email, "password": DEFAULT_PASSWORD},
        headers={"X-Tenant-Slug": "clinic-a"},
    )
    assert relogin.status_code == 401


@pytest.mark.tenancy
async def test_same_email_in_two_tenants_are_distinct_users(client):
    first = await register_tenant(client, "north", admin_email="shared@x.com")
    second = await register_tenant(client, "south", admin_email="shared@x.com")

    assert first.user_id != second.user_id
    assert (await login(client, "north", "shared@x.com")).user_id == first.user_id
    assert (await login(client, "south", "shared@x.com")).user_id == second.user_id
