"""Tests for user management within a tenant."""

from tests.conftest import add_user


async def test_admin_creates_user(client, clinic_a):
    response = await client.post(
        "/api/users",
        json={
            "email": "Terapeuta@Clinic-A.com",
            "password": "pw123",
            "full_name": "Tina Terapeuta",
            "role": "therapist",
            "professional_registry": "CREFITO-3 12345",
        },
        headers=clinic_a.headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["email"] == "terapeuta@clinic-a.com"
    assert body["role"] == "therapist"
    assert body["is_active"] is True
    assert "password" not in body and "password_hash" not in body


async def test_duplicate_email_in_tenant_conflicts(client, clinic_a):
    response = await client.post(
        "/api/users",
        json={"email": "a@x.com", "password": "pw123", "full_name": "Duplicate"},
        headers=clinic_a.headers,
    )
    assert response.status_code == 409


async def test_user_password_limit_counts_bytes(client, clinic_a):
    response = await client.post(
        "/api/users",
        json={"email": "long@x.com", "password": "\u00e7" * 37, "full_name": "Long Password"},
        headers=clinic_a.headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_list_users_filters_by_role(client, clinic_a):
    await add_user(client, clinic_a, "therapist")
    await add_user(client, clinic_a, "nurse")

    response = await client.get("/api/users", params={"role": "nurse"}, headers=clinic_a.headers)

    assert response.status_code == 200
    assert [u["role"] for u in response.json()["data"]] == ["nurse"]


async def test_admin_cannot_demote_self(client, clinic_a):
    response = await client.patch(
        f"/api/users/{clinic_a.user_id}", json={"role": "therapist"}, headers=clinic_a.headers
    )
    assert response.status_code == 400


async def test_required_field_cannot_be_nulled(client, clinic_a):
    therapist = await add_user(client, clinic_a, "therapist")

    response = await client.patch(
        f"/api/users/{therapist.user_id}", json={"full_name": None}, headers=clinic_a.headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"][0]["loc"] == ["body", "full_name"]


async def test_admin_changes_other_role(client, clinic_a):
    therapist = await add_user(client, clinic_a, "therapist")

    response = await client.patch(
        f"/api/users/{therapist.user_id}", json={"role": "doctor"}, headers=clinic_a.headers
    )

    assert response.status_code == 200
    assert response.json()["role"] == "doctor"


async def test_admin_cannot_deactivate_self(client, clinic_a):
    response = await client.delete(f"/api/users/{clinic_a.user_id}", headers=clinic_a.headers)
    assert response.status_code == 400
