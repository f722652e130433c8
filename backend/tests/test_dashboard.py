"""Tests for dashboard statistics."""

from datetime import datetime, timedelta, timezone

from fisiohub.services.dashboard import periods
from tests.conftest import create_appointment, create_patient


def iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def test_periods_week_starts_on_sunday():
    # 2030-05-22 is a Wednesday
    ranges = periods(datetime(2030, 5, 22, 15, 30, tzinfo=timezone.utc))

    assert ranges["today"].start == datetime(2030, 5, 22, tzinfo=timezone.utc)
    assert ranges["today"].end == datetime(2030, 5, 23, tzinfo=timezone.utc)
    assert ranges["week"].start == datetime(2030, 5, 19, tzinfo=timezone.utc)
    assert ranges["week"].end == datetime(2030, 5, 26, tzinfo=timezone.utc)
    assert ranges["month"].start == datetime(2030, 5, 1, tzinfo=timezone.utc)
    assert ranges["month"].end == datetime(2030, 6, 1, tzinfo=timezone.utc)


def test_periods_sunday_starts_its_own_week():
    ranges = periods(datetime(2030, 5, 19, 1, tzinfo=timezone.utc))
    assert ranges["week"].start == datetime(2030, 5, 19, tzinfo=timezone.utc)


def test_periods_december_rolls_into_next_year():
    ranges = periods(datetime(2030, 12, 31, 23, tzinfo=timezone.utc))
    assert ranges["month"].end == datetime(2031, 1, 1, tzinfo=timezone.utc)


async def test_stats_count_and_revenue(client, clinic_a, clinic_b, patient_a):
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    await create_patient(client, clinic_a, full_name="Inactive Person", document="00011122233")
    inactive = (await client.get("/api/patients", params={"search": "Inactive"}, headers=clinic_a.headers)).json()
    await client.patch(
        f"/api/patients/{inactive['data'][0]['id']}", json={"is_active": False}, headers=clinic_a.headers
    )

    await create_appointment(
        client, clinic_a, patient_a["id"], iso(today + timedelta(hours=1)), status="completed", price="100.50"
    )
    await create_appointment(
        client, clinic_a, patient_a["id"], iso(today + timedelta(hours=3)), status="completed"
    )
    await create_appointment(
        client, clinic_a, patient_a["id"], iso(today + timedelta(hours=5)), price="80.00"
    )
    await create_appointment(
        client, clinic_a, patient_a["id"], iso(today - timedelta(days=400)), status="completed", price="999.00"
    )
    other = await create_patient(client, clinic_b, full_name="Other Tenant")
    await create_appointment(
        client, clinic_b, other["id"], iso(today + timedelta(hours=1)), status="completed", price="500.00"
    )

    response = await client.get("/api/dashboard/stats", headers=clinic_a.headers)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["total_patients"] == 1
    assert body["total_appointments"] == 4
    assert body["appointments_today"] == 3
    assert body["revenue"]["today"] == "100.50"
    assert body["revenue"]["this_month"] == "100.50"


async def test_upcoming_and_recent(client, clinic_a, patient_a):
    now = datetime.now(timezone.utc)
    end_of_day = now.replace(hour=23, minute=59, second=0, microsecond=0)
    if end_of_day - now > timedelta(minutes=2):
        upcoming = await create_appointment(
            client, clinic_a, patient_a["id"], iso(now + (end_of_day - now) / 2)
        )
    else:
        upcoming = None
    past = await create_appointment(client, clinic_a, patient_a["id"], iso(now - timedelta(days=2)))
    await client.post(
        "/api/evolutions", json={"appointment_id": past["id"], "symptoms": "Stiffness"}, headers=clinic_a.headers
    )

    upcoming_response = await client.get("/api/dashboard/upcoming-appointments", headers=clinic_a.headers)
    recent_response = await client.get("/api/dashboard/recent-evolutions", headers=clinic_a.headers)

    assert upcoming_response.status_code == 200, upcoming_response.text
    expected = [upcoming["id"]] if upcoming else []
    assert [a["id"] for a in upcoming_response.json()] == expected
    if upcoming:
        assert upcoming_response.json()[0]["patient"]["full_name"] == "Ana Lima"

    assert recent_response.status_code == 200, recent_response.text
    assert recent_response.json()[0]["patient"]["full_name"] == "Ana Lima"
