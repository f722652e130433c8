"""Tests for clinical services and clinical indicators."""

import pytest

from fisiohub.api.v1.endpoints.services import default_style
from tests.conftest import add_user


async def create_service(client, session, **fields):
    payload = {"name": "Fisioterapia Motora", "code": "fisio-motora", **fields}
    response = await client.post("/api/services", json=payload, headers=session.headers)
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# Clinical Services
# ============================================================================

@pytest.mark.parametrize(
    "name, expected",
    [
        ("Fisioterapia", ("#10B981", "heart")),
        ("Psicologia", ("#3B82F6", "brain")),
        ("Serviço Social", ("#F59E0B", "users")),
        ("Nutrição", ("#EF4444", "apple")),
        ("Terapia Ocupacional", ("#8B5CF6", "hand")),
        ("Fonoaudiologia", ("#6B7280", "activity")),
    ],
)
def test_default_style_from_name(name, expected):
    assert default_style(name) == expected


async def test_create_service_with_defaults(client, clinic_a):
    service = await create_service(client, clinic_a)

    assert service["color"] == "#10B981"
    assert service["icon"] == "heart"
    assert service["is_active"] is True


async def test_explicit_style_kept(client, clinic_a):
    service = await create_service(client, clinic_a, color="#000000", icon="star")
    assert (service["color"], service["icon"]) == ("#000000", "star")


async def test_duplicate_code_conflicts(client, clinic_a, clinic_b):
    await create_service(client, clinic_a)

    duplicate = await client.post(
        "/api/services", json={"name": "Other", "code": "fisio-motora"}, headers=clinic_a.headers
    )
    assert duplicate.status_code == 409

    # Codes are unique per tenant only
    await create_service(client, clinic_b)


async def test_rename_code_to_taken_one_conflicts(client, clinic_a):
    await create_service(client, clinic_a)
    other = await create_service(client, clinic_a, name="Psicologia", code="psico")

    response = await client.patch(
        f"/api/services/{other['id']}", json={"code": "fisio-motora"}, headers=clinic_a.headers
    )
    assert response.status_code == 409


async def test_only_admin_manages_services(client, clinic_a):
    therapist = await add_user(client, clinic_a, "therapist")

    response = await client.post(
        "/api/services", json={"name": "Psicologia", "code": "psico"}, headers=therapist.headers
    )
    listed = await client.get("/api/services", headers=therapist.headers)

    assert response.status_code == 403
    assert listed.status_code == 200


async def test_delete_unused_service(client, clinic_a):
    service = await create_service(client, clinic_a)

    response = await client.delete(f"/api/services/{service['id']}", headers=clinic_a.headers)

    assert response.status_code == 200
    assert response.json()["deleted"] is True
    assert (await client.get(f"/api/services/{service['id']}", headers=clinic_a.headers)).status_code == 404


async def test_delete_used_service_deactivates(client, clinic_a, patient_a):
    service = await create_service(client, clinic_a)
    recorded = await client.post(
        "/api/indicators",
        json={"service_id": service["id"], "patient_id": patient_a["id"], "discharges": 2},
        headers=clinic_a.headers,
    )
    assert recorded.status_code == 201, recorded.text

    response = await client.delete(f"/api/services/{service['id']}", headers=clinic_a.headers)

    assert response.status_code == 200
    assert response.json()["deleted"] is False
    kept = await client.get(f"/api/services/{service['id']}", headers=clinic_a.headers)
    assert kept.json()["is_active"] is False

    active = await client.get("/api/services", params={"active": True}, headers=clinic_a.headers)
    assert active.json()["pagination"]["total"] == 0


async def test_service_stats(client, clinic_a, patient_a):
    service = await create_service(client, clinic_a)
    for _ in range(2):
        await client.post(
            "/api/indicators",
            json={"service_id": service["id"], "patient_id": patient_a["id"], "deaths": 0},
            headers=clinic_a.headers,
        )
    await client.post("/api/indicators", json={"service_id": service["id"]}, headers=clinic_a.headers)

    response = await client.get(f"/api/services/{service['id']}/stats", headers=clinic_a.headers)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["service"]["code"] == "fisio-motora"
    assert body["indicators_total"] == 3
    assert body["indicators_last_30_days"] == 3
    assert body["patients_referenced"] == 1


# ============================================================================
# Indicators
# ============================================================================

async def test_record_indicators(client, clinic_a):
    response = await client.post(
        "/api/indicators",
        json={
            "reference_date": "2030-04-01",
            "sector": "UTI Adulto",
            "shift": "morning",
            "collaborator": "Equipe A",
            "patients_hospitalized": 18,
            "extubation_effectiveness_rate": 87.5,
            "falls_and_incidents": 0,
        },
        headers=clinic_a.headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["recorded_by"] == str(clinic_a.user_id)
    assert body["patients_hospitalized"] == 18
    assert body["extubation_effectiveness_rate"] == 87.5
    assert body["deaths"] is None


@pytest.mark.parametrize(
    "field, value",
    [("patients_hospitalized", -1), ("sedestation_rate", 100.5), ("aspiration_rate", -0.1)],
)
async def test_indicator_ranges(client, clinic_a, field, value):
    response = await client.post("/api/indicators", json={field: value}, headers=clinic_a.headers)
    assert response.status_code == 400


async def test_indicator_for_inactive_service_rejected(client, clinic_a):
    service = await create_service(client, clinic_a)
    await client.patch(f"/api/services/{service['id']}", json={"is_active": False}, headers=clinic_a.headers)

    response = await client.post("/api/indicators", json={"service_id": service["id"]}, headers=clinic_a.headers)

    assert response.status_code == 400


async def test_indicator_for_other_tenant_patient(client, clinic_b, patient_a):
    response = await client.post("/api/indicators", json={"patient_id": patient_a["id"]}, headers=clinic_b.headers)
    assert response.status_code == 404


async def test_indicator_filters_and_delete(client, clinic_a):
    for day, sector in (("2030-04-01", "UTI"), ("2030-04-02", "Enfermaria"), ("2030-04-03", "UTI")):
        await client.post(
            "/api/indicators", json={"reference_date": day, "sector": sector}, headers=clinic_a.headers
        )

    ranged = await client.get(
        "/api/indicators",
        params={"date_from": "2030-04-02", "date_to": "2030-04-03"},
        headers=clinic_a.headers,
    )
    searched = await client.get("/api/indicators", params={"search": "uti"}, headers=clinic_a.headers)

    assert [i["reference_date"] for i in ranged.json()["data"]] == ["2030-04-03", "2030-04-02"]
    assert searched.json()["pagination"]["total"] == 2

    target = searched.json()["data"][0]["id"]
    assert (await client.delete(f"/api/indicators/{target}", headers=clinic_a.headers)).status_code == 204
    assert (await client.get(f"/api/indicators/{target}", headers=clinic_a.headers)).status_code == 404
