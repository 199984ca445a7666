"""
HTTP tests for slots and appointments endpoints.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from backend.app.database import READ_ONLY, configure_sqlite, get_db, get_read_db
from backend.app.dependencies import get_now
from backend.app.main import app
from backend.app.models.generated import Base, StaffMembers
from backend.app.redis_client import get_redis

NOW = datetime(2030, 1, 6, 8, 0)


@pytest.fixture
def api(db):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_read_db] = lambda: db
    app.dependency_overrides[get_now] = lambda: NOW
    app.dependency_overrides[get_redis] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _headers(user):
    return {"X-User-ID": str(user.id)}


def _book(api, user, service, staff, start="2030-01-07T14:00:00"):
    return api.post(
        "/appointments/",
        json={"service_id": service.id, "staff_id": staff.id, "start_time": start},
        headers=_headers(user),
    )


def test_available_slots(api, staff, service, monday_hours):
    response = api.get(
        "/slots/available",
        params={"date": "2030-01-07", "service_id": service.id, "staff_id": staff.id},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["slot_interval_minutes"] == 30
    starts = [s["start_time"] for s in body["slots"]]
    assert starts[0] == "2030-01-07T09:00:00"
    assert "2030-01-07T12:00:00" not in starts
    assert all(s["available"] for s in body["slots"])
    assert body["slots"][0]["staff_name"] == "Claire Dubois"


def test_available_slots_unknown_service(api, staff):
    response = api.get(
        "/slots/available",
        params={"date": "2030-01-07", "service_id": 999, "staff_id": staff.id},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_available_slots_in_the_past(api, staff, service):
    response = api.get(
        "/slots/available",
        params={"date": "2029-12-31", "service_id": service.id, "staff_id": staff.id},
    )

    assert response.status_code == 400


def test_booked_slot_disappears(api, client_user, staff, service, monday_hours):
    assert _book(api, client_user, service, staff).status_code == 201

    response = api.get(
        "/slots/available",
        params={"date": "2030-01-07", "service_id": service.id, "staff_id": staff.id},
    )
    starts = [s["start_time"] for s in response.json()["slots"]]
    assert "2030-01-07T14:00:00" not in starts


def test_create_and_conflict(api, client_user, other_user, staff, service):
    created = _book(api, client_user, service, staff)
    assert created.status_code == 201
    assert created.json()["status"] == "pending"
    assert created.json()["end_time"] == "14:30:00"

    conflict = _book(api, other_user, service, staff, start="2030-01-07T14:15:00")
    assert conflict.status_code == 409
    assert conflict.json()["code"] == "slot_conflict"

    adjacent = _book(api, other_user, service, staff, start="2030-01-07T14:30:00")
    assert adjacent.status_code == 201


def test_create_too_soon(api, client_user, staff, service):
    response = _book(api, client_user, service, staff, start="2030-01-06T08:30:00")

    assert response.status_code == 422
    assert response.json()["code"] == "booking_too_soon"


def test_start_time_with_offset_is_rejected(api, client_user, staff, service):
    response = _book(api, client_user, service, staff, start="2030-01-07T14:00:00+01:00")

    assert response.status_code == 422

    appointment_id = _book(api, client_user, service, staff).json()["id"]
    moved = api.patch(
        f"/appointments/{appointment_id}",
        json={"start_time": "2030-01-07T15:00:00Z"},
        headers=_headers(client_user),
    )

    assert moved.status_code == 422
    assert api.get(f"/appointments/{appointment_id}", headers=_headers(client_user)).json()["start_time"] == "14:00:00"


def test_my_appointments(api, client_user, other_user, staff, service):
    _book(api, client_user, service, staff, start="2030-01-07T14:00:00")
    _book(api, client_user, service, staff, start="2030-01-08T10:00:00")
    _book(api, client_user, service, staff, start="2030-01-07T16:00:00")
    _book(api, other_user, service, staff, start="2030-01-07T15:00:00")

    response = api.get("/appointments/mine", headers=_headers(client_user))

    assert response.status_code == 200
    assert [(a["appointment_date"], a["start_time"]) for a in response.json()] == [
        ("2030-01-08", "10:00:00"),
        ("2030-01-07", "16:00:00"),
        ("2030-01-07", "14:00:00"),
    ]
    assert api.get("/appointments/mine").status_code == 401


def test_missing_identity(api, staff, service):
    response = api.post(
        "/appointments/",
        json={"service_id": service.id, "staff_id": staff.id, "start_time": "2030-01-07T14:00:00"},
    )

    assert response.status_code == 401


def test_read_reschedule_cancel(api, client_user, other_user, staff, service):
    appointment_id = _book(api, client_user, service, staff).json()["id"]

    assert api.get(f"/appointments/{appointment_id}", headers=_headers(other_user)).status_code == 403
    assert api.get(f"/appointments/{appointment_id}", headers=_headers(client_user)).status_code == 200

    moved = api.patch(
        f"/appointments/{appointment_id}",
        json={"start_time": "2030-01-07T15:00:00"},
        headers=_headers(client_user),
    )
    assert moved.status_code == 200
    assert moved.json()["start_time"] == "15:00:00"

    cancelled = api.post(
        f"/appointments/{appointment_id}/cancel",
        json={"reason": "Empêchement"},
        headers=_headers(client_user),
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["cancellation_reason"] == "Empêchement"

    again = api.post(f"/appointments/{appointment_id}/cancel", json={}, headers=_headers(client_user))
    assert again.status_code == 409
    assert again.json()["code"] == "not_cancellable"


def test_cancel_too_late(api, client_user, staff, service):
    appointment_id = _book(api, client_user, service, staff, start="2030-01-06T20:00:00").json()["id"]

    response = api.post(f"/appointments/{appointment_id}/cancel", json={}, headers=_headers(client_user))

    assert response.status_code == 422
    assert response.json()["code"] == "cancellation_too_late"


def test_confirm(api, client_user, admin_user, staff, service):
    appointment_id = _book(api, client_user, service, staff).json()["id"]

    assert api.post(f"/appointments/{appointment_id}/confirm", headers=_headers(client_user)).status_code == 403

    response = api.post(f"/appointments/{appointment_id}/confirm", headers=_headers(admin_user))
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"


def test_delete_not_allowed(api, client_user):
    assert api.delete("/appointments/1", headers=_headers(client_user)).status_code == 405


def test_invalidate_requires_admin(api, client_user, admin_user, staff):
    url = "/slots/invalidate"
    params = {"staff_id": staff.id, "date_start": "2030-01-07", "date_end": "2030-01-09"}

    assert api.post(url, params=params, headers=_headers(client_user)).status_code == 403

    response = api.post(url, params=params, headers=_headers(admin_user))
    assert response.status_code == 200
    assert response.json()["dates"] == ["2030-01-07", "2030-01-08", "2030-01-09"]
    # Cache disabled in tests
    assert response.json()["deleted_keys"] == 0


def test_sqlite_writers_are_serialized(tmp_path):
    engine = configure_sqlite(create_engine(
        f"sqlite:///{tmp_path / 'salon.db'}",
        connect_args={"check_same_thread": False, "timeout": 0.1},
    ))
    Base.metadata.create_all(engine)

    first = Session(engine)
    second = Session(engine)
    try:
        first.execute(select(1))
        # The first transaction holds the write lock until it ends
        with pytest.raises(OperationalError):
            second.execute(select(1))
        first.rollback()
        second.rollback()
        assert second.execute(select(1)).scalar() == 1
    finally:
        first.close()
        second.close()
        engine.dispose()


def test_sqlite_readers_do_not_take_the_write_lock(tmp_path):
    engine = configure_sqlite(create_engine(
        f"sqlite:///{tmp_path / 'salon.db'}",
        connect_args={"check_same_thread": False, "timeout": 0.1},
    ))
    Base.metadata.create_all(engine)

    reader = Session(engine.execution_options(**{READ_ONLY: True}))
    writer = Session(engine)
    try:
        assert reader.execute(select(StaffMembers)).all() == []
        # A slot listing in progress does not block a booking
        writer.execute(select(1))
        assert reader.execute(select(StaffMembers)).all() == []
    finally:
        reader.close()
        writer.close()
        engine.dispose()
