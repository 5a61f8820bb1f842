from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from testbook.core.time import utcnow
from testbook.models import LiveClass, LiveClassAttendance

from conftest import auth_headers

pytestmark = pytest.mark.anyio


def _class_payload(start_in=timedelta(days=1), **overrides):
    payload = {
        "title": "Thermodynamics doubt session",
        "description": "Open doubt clearing for the heat engines chapter",
        "subject": "Physics",
        "start_time": (utcnow() + start_in).isoformat() + "Z",
        "duration": 60,
        "max_attendees": 100,
    }
    payload.update(overrides)
    return payload


# ============ Create ============

async def test_instructor_schedules_class(client, instructor):
    r = await client.post("/api/live-classes", json=_class_payload(), headers=auth_headers(instructor))

    assert r.status_code == 201
    live_class = r.json()["data"]["live_class"]
    assert live_class["status"] == "SCHEDULED"
    assert live_class["instructor"]["id"] == instructor.id
    assert live_class["meeting_id"].startswith("LC_")
    assert live_class["is_public"] is True


async def test_scheduled_class_ends_after_duration(client, instructor):
    r = await client.post(
        "/api/live-classes",
        json=_class_payload(duration=90),
        headers=auth_headers(instructor),
    )

    detail = (await client.get(f"/api/live-classes/{r.json()['data']['live_class']['id']}")).json()["data"]
    end, start = detail["end_time"], detail["start_time"]
    assert datetime.fromisoformat(end) - datetime.fromisoformat(start) == timedelta(minutes=90)


async def test_schedule_in_past_is_rejected(client, instructor):
    r = await client.post(
        "/api/live-classes",
        json=_class_payload(start_in=timedelta(minutes=-1)),
        headers=auth_headers(instructor),
    )

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Start time must be in the future"


async def test_overlapping_class_conflicts(client, instructor):
    headers = auth_headers(instructor)
    assert (await client.post("/api/live-classes", json=_class_payload(), headers=headers)).status_code == 201

    r = await client.post(
        "/api/live-classes",
        json=_class_payload(start_in=timedelta(days=1, minutes=30)),
        headers=headers,
    )

    assert r.status_code == 409
    assert r.json()["error"]["message"] == "You have a conflicting class scheduled at this time"


async def test_back_to_back_classes_do_not_conflict(client, instructor):
    headers = auth_headers(instructor)
    assert (await client.post("/api/live-classes", json=_class_payload(), headers=headers)).status_code == 201

    r = await client.post(
        "/api/live-classes",
        json=_class_payload(start_in=timedelta(days=1, minutes=61)),
        headers=headers,
    )

    assert r.status_code == 201


async def test_cancelled_class_does_not_block_schedule(client, instructor, make_live_class):
    await make_live_class(start_in=timedelta(days=1), status="CANCELLED")

    r = await client.post("/api/live-classes", json=_class_payload(), headers=auth_headers(instructor))

    assert r.status_code == 201


async def test_short_class_is_rejected(client, instructor):
    r = await client.post(
        "/api/live-classes",
        json=_class_payload(duration=10),
        headers=auth_headers(instructor),
    )

    assert r.status_code == 400


async def test_student_cannot_schedule(client, student):
    r = await client.post("/api/live-classes", json=_class_payload(), headers=auth_headers(student))

    assert r.status_code == 403


# ============ List / detail ============

async def test_anonymous_list_shows_public_only(client, make_live_class):
    public = await make_live_class()
    await make_live_class(is_public=False)

    r = await client.get("/api/live-classes")

    assert [lc["id"] for lc in r.json()["data"]] == [public.id]
    assert r.json()["meta"]["total"] == 1


async def test_authenticated_list_includes_private(client, student, make_live_class):
    await make_live_class()
    await make_live_class(is_public=False)

    r = await client.get("/api/live-classes", headers=auth_headers(student))

    assert r.json()["meta"]["total"] == 2


async def test_list_filters_by_status(client, make_live_class):
    await make_live_class(status="LIVE")
    await make_live_class(status="CANCELLED")

    r = await client.get("/api/live-classes?status=LIVE")

    assert [lc["status"] for lc in r.json()["data"]] == ["LIVE"]


async def test_detail_reports_attendee_count(client, make_user, make_live_class, add_attendance):
    live_class = await make_live_class()
    for _ in range(3):
        await add_attendance(await make_user(), live_class)

    r = await client.get(f"/api/live-classes/{live_class.id}")

    assert r.status_code == 200
    assert r.json()["data"]["attendee_count"] == 3


async def test_private_detail_is_limited_to_instructor(client, instructor, student, make_live_class):
    live_class = await make_live_class(is_public=False)
    url = f"/api/live-classes/{live_class.id}"

    denied = await client.get(url, headers=auth_headers(student))
    assert denied.status_code == 403
    assert denied.json()["error"]["message"] == "You do not have permission to view this class"

    assert (await client.get(url)).status_code == 403
    assert (await client.get(url, headers=auth_headers(instructor))).status_code == 200


async def test_admin_may_view_private_detail(client, make_user, make_live_class):
    live_class = await make_live_class(is_public=False)
    admin = await make_user(role="ADMIN")

    r = await client.get(f"/api/live-classes/{live_class.id}", headers=auth_headers(admin))

    assert r.status_code == 200
    assert r.json()["data"]["is_public"] is False


async def test_list_search_treats_wildcards_literally(client, make_live_class):
    await make_live_class()

    assert (await client.get("/api/live-classes?search=_")).json()["meta"]["total"] == 0
    assert (await client.get("/api/live-classes?search=%25")).json()["meta"]["total"] == 0
    assert (await client.get("/api/live-classes?search=revision")).json()["meta"]["total"] == 1


async def test_detail_of_missing_class(client):
    r = await client.get("/api/live-classes/00000000-0000-4000-8000-000000000000")

    assert r.status_code == 404


# ============ Update ============

def _iso(value: datetime) -> str:
    return value.isoformat() + "Z"


async def _class_count(db) -> int:
    return await db.scalar(select(func.count()).select_from(LiveClass))


async def test_instructor_updates_class_details(client, instructor, make_live_class):
    live_class = await make_live_class(start_in=timedelta(days=1))

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={
            "title": "Kinematics, part two",
            "max_attendees": 50,
            "meeting_url": "https://meet.example.com/part-two",
        },
        headers=auth_headers(instructor),
    )

    assert r.status_code == 200
    updated = r.json()["data"]["live_class"]
    assert updated["title"] == "Kinematics, part two"
    assert updated["max_attendees"] == 50
    assert updated["meeting_url"] == "https://meet.example.com/part-two"
    assert updated["instructor"]["id"] == instructor.id
    assert datetime.fromisoformat(updated["start_time"]) == live_class.start_time


async def test_reschedule_keeps_length(client, instructor, make_live_class):
    live_class = await make_live_class(start_in=timedelta(days=1), length=timedelta(minutes=45))
    new_start = live_class.start_time + timedelta(days=1)

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"start_time": _iso(new_start)},
        headers=auth_headers(instructor),
    )

    assert r.status_code == 200
    updated = r.json()["data"]["live_class"]
    start, end = datetime.fromisoformat(updated["start_time"]), datetime.fromisoformat(updated["end_time"])
    assert start == new_start
    assert end - start == timedelta(minutes=45)


async def test_new_duration_moves_end_time(client, instructor, make_live_class):
    live_class = await make_live_class(start_in=timedelta(days=1))

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"duration": 90},
        headers=auth_headers(instructor),
    )

    updated = r.json()["data"]["live_class"]
    assert datetime.fromisoformat(updated["end_time"]) == live_class.start_time + timedelta(minutes=90)


async def test_reschedule_into_past_is_rejected(client, instructor, make_live_class):
    live_class = await make_live_class(start_in=timedelta(days=1))

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"start_time": _iso(utcnow() - timedelta(hours=1))},
        headers=auth_headers(instructor),
    )

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Start time must be in the future"


@pytest.mark.parametrize("status", ["LIVE", "COMPLETED"])
async def test_timing_of_started_class_is_frozen(client, instructor, make_live_class, status):
    live_class = await make_live_class(status=status)

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"duration": 90},
        headers=auth_headers(instructor),
    )

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Cannot modify timing of live or completed classes"


async def test_reschedule_onto_another_class_conflicts(client, instructor, make_live_class):
    await make_live_class(start_in=timedelta(days=1))
    later = await make_live_class(start_in=timedelta(days=2))

    r = await client.put(
        f"/api/live-classes/{later.id}",
        json={"start_time": _iso(utcnow() + timedelta(days=1, minutes=30))},
        headers=auth_headers(instructor),
    )

    assert r.status_code == 409
    assert r.json()["error"]["message"] == "You have a conflicting class scheduled at this time"


async def test_shifting_a_class_over_its_own_slot_is_allowed(client, instructor, make_live_class):
    live_class = await make_live_class(start_in=timedelta(days=1))

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"start_time": _iso(live_class.start_time + timedelta(minutes=30))},
        headers=auth_headers(instructor),
    )

    assert r.status_code == 200


async def test_cancelled_class_cannot_be_joined(client, instructor, student, make_live_class):
    live_class = await make_live_class()

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"status": "CANCELLED"},
        headers=auth_headers(instructor),
    )
    assert r.json()["data"]["live_class"]["status"] == "CANCELLED"

    joined = await client.post(f"/api/live-classes/{live_class.id}/join", headers=auth_headers(student))
    assert joined.status_code == 400
    assert joined.json()["error"]["message"] == "This class has been cancelled"


async def test_other_instructor_cannot_update_class(client, make_user, make_live_class):
    live_class = await make_live_class()
    other = await make_user(role="INSTRUCTOR")

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"title": "Not mine"},
        headers=auth_headers(other),
    )

    assert r.status_code == 403
    assert r.json()["error"]["message"] == "You do not have permission to update this class"


async def test_admin_updates_any_class(client, make_user, make_live_class):
    live_class = await make_live_class()
    admin = await make_user(role="ADMIN")

    r = await client.put(
        f"/api/live-classes/{live_class.id}",
        json={"is_public": False},
        headers=auth_headers(admin),
    )

    assert r.status_code == 200
    assert r.json()["data"]["live_class"]["is_public"] is False


async def test_update_missing_class(client, instructor):
    r = await client.put(
        "/api/live-classes/00000000-0000-4000-8000-000000000000",
        json={"title": "Nothing here"},
        headers=auth_headers(instructor),
    )

    assert r.status_code == 404


# ============ Delete ============

async def test_instructor_deletes_class_and_its_attendance(
    client, db, instructor, student, make_live_class, add_attendance
):
    live_class = await make_live_class()
    await add_attendance(student, live_class, left=True)

    r = await client.delete(f"/api/live-classes/{live_class.id}", headers=auth_headers(instructor))

    assert r.status_code == 200
    assert r.json()["data"]["message"] == "Live class deleted successfully"
    assert await _class_count(db) == 0
    assert await db.scalar(select(func.count()).select_from(LiveClassAttendance)) == 0


@pytest.mark.parametrize("status", ["LIVE", "COMPLETED"])
async def test_attended_class_cannot_be_deleted(
    client, db, instructor, student, make_live_class, add_attendance, status
):
    live_class = await make_live_class(status=status)
    await add_attendance(student, live_class)

    r = await client.delete(f"/api/live-classes/{live_class.id}", headers=auth_headers(instructor))

    assert r.status_code == 409
    assert r.json()["error"]["message"] == "Cannot delete live or completed classes with attendees"
    assert await _class_count(db) == 1


async def test_live_class_without_attendees_can_be_deleted(client, db, instructor, make_live_class):
    live_class = await make_live_class(status="LIVE")

    r = await client.delete(f"/api/live-classes/{live_class.id}", headers=auth_headers(instructor))

    assert r.status_code == 200
    assert await _class_count(db) == 0


async def test_student_cannot_delete_class(client, db, student, make_live_class):
    live_class = await make_live_class()

    r = await client.delete(f"/api/live-classes/{live_class.id}", headers=auth_headers(student))

    assert r.status_code == 403
    assert r.json()["error"]["message"] == "You do not have permission to delete this class"
    assert await _class_count(db) == 1


async def test_admin_deletes_any_class(client, db, make_user, make_live_class):
    live_class = await make_live_class()
    admin = await make_user(role="ADMIN")

    r = await client.delete(f"/api/live-classes/{live_class.id}", headers=auth_headers(admin))

    assert r.status_code == 200
    assert await _class_count(db) == 0
