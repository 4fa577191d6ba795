from __future__ import annotations

import io

import pytest
from werkzeug.security import generate_password_hash

from src.activity_tracker.activity_tracker.artifacts.store import LocalArtifactStore
from src.activity_tracker.activity_tracker.container import build_services
from src.activity_tracker.activity_tracker.core.enums import Role
from src.activity_tracker.activity_tracker.main import create_app
from tests.fakes import InMemoryActivities, InMemoryUsers


@pytest.fixture
def api(tmp_path):
    users = InMemoryUsers()
    activities = InMemoryActivities(users)
    container = build_services(
        users_repo=users,
        activities_repo=activities,
        artifacts=LocalArtifactStore(tmp_path / "uploads"),
    )
    app = create_app(settings_module="config.testing", container=container)
    people = {
        "s1": users.add("Sana", Role.STUDENT, department="CS", class_name="A", semester=5, roll_number="CS001"),
        "s2": users.add("Omar", Role.STUDENT, department="EE", class_name="A", semester=5, roll_number="EE001"),
        "t1": users.add("Tara", Role.TEACHER, department="CS", class_name="A"),
        "t2": users.add("Ivan", Role.TEACHER, department="EE"),
        "admin": users.add(
            "Root",
            Role.SUPERADMIN,
            email="admin@example.com",
            password_hash=generate_password_hash("password123"),
        ),
    }
    return app.test_client(), users, activities, people


def _login_as(client, user):
    with client.session_transaction() as sess:
        sess["user_id"] = user.user_id


def _submit(client, **fields):
    form = {
        "activityType": "Technical",
        "title": "Hackathon",
        "description": "24h build",
        "date": "2026-01-20",
        "certificate": (io.BytesIO(b"%PDF-1.4 test"), "hackathon.pdf"),
    }
    form.update(fields)
    return client.post("/api/activities", data=form, content_type="multipart/form-data")


def test_anonymous_requests_get_401(api):
    client, *_ = api

    resp = client.get("/api/activities/pending")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_wrong_role_gets_403(api):
    client, _, _, p = api
    _login_as(client, p["s1"])

    assert client.get("/api/activities/pending").status_code == 403
    assert client.get("/api/activities/report").status_code == 403


def test_login_me_logout(api):
    client, *_ = api

    resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "password123"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["role"] == "superadmin"

    assert client.get("/api/auth/me").get_json()["data"]["email"] == "admin@example.com"
    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_bad_login_is_401(api):
    client, *_ = api

    resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid credentials"


def test_register_logs_the_new_user_in(api):
    client, *_ = api

    resp = client.post(
        "/api/auth/register",
        json={
            "name": "Nia",
            "email": "nia@example.com",
            "password": "secret1",
            "department": "CS",
            "class": "A",
            "semester": 2,
            "rollNumber": "CS050",
        },
    )

    assert resp.status_code == 201
    assert client.get("/api/auth/me").get_json()["data"]["rollNumber"] == "CS050"


def test_submit_then_review_flow(api):
    client, _, _, p = api
    _login_as(client, p["s1"])

    resp = _submit(client)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["teacherCount"] == 1
    assert body["data"]["status"] == "pending"
    assert body["data"]["studentDepartment"] == "CS"
    activity_id = body["data"]["id"]

    _login_as(client, p["t1"])
    pending = client.get("/api/activities/pending").get_json()
    assert pending["count"] == 1
    assert pending["data"][0]["student"]["rollNumber"] == "CS001"

    resp = client.put(f"/api/activities/{activity_id}/review", json={"status": "approved", "pointsAwarded": 15})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["pointsAwarded"] == 15
    assert resp.get_json()["data"]["reviewedBy"] == p["t1"].user_id

    again = client.put(f"/api/activities/{activity_id}/review", json={"status": "rejected"})
    assert again.status_code == 400
    assert again.get_json()["field"] == "status"


def test_submit_without_certificate_is_400(api):
    client, _, activities, p = api
    _login_as(client, p["s1"])

    resp = client.post(
        "/api/activities",
        data={"activityType": "Sports", "title": "Run", "description": "10k", "date": "2026-01-05"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "certificate"
    assert activities.rows == {}


def test_out_of_department_review_is_concealed_as_404(api):
    client, _, activities, p = api
    _login_as(client, p["s1"])
    activity_id = _submit(client).get_json()["data"]["id"]

    _login_as(client, p["t2"])
    hidden = client.put(f"/api/activities/{activity_id}/review", json={"status": "approved"})
    missing = client.put("/api/activities/999/review", json={"status": "approved"})

    assert hidden.status_code == missing.status_code == 404
    assert hidden.get_json() == missing.get_json()
    assert activities.review_calls == 0


def test_certificate_download_is_scoped(api):
    client, _, _, p = api
    _login_as(client, p["s1"])
    activity_id = _submit(client).get_json()["data"]["id"]

    resp = client.get(f"/api/activities/{activity_id}/certificate")
    assert resp.status_code == 200
    assert resp.data == b"%PDF-1.4 test"

    _login_as(client, p["s2"])
    assert client.get(f"/api/activities/{activity_id}/certificate").status_code == 404


def test_report_json(api):
    client, _, _, p = api
    _login_as(client, p["s1"])
    activity_id = _submit(client).get_json()["data"]["id"]
    _login_as(client, p["t1"])
    client.put(f"/api/activities/{activity_id}/review", json={"status": "approved", "pointsAwarded": 15})

    _login_as(client, p["admin"])
    body = client.get("/api/activities/report?department=CS").get_json()

    assert body["count"] == 1
    row = body["data"][0]
    assert row["student"]["name"] == "Sana"
    assert (row["totalActivities"], row["approvedActivities"], row["totalPoints"]) == (1, 1, 15)


def test_teacher_cannot_see_out_of_scope_user(api):
    client, _, _, p = api
    _login_as(client, p["t1"])

    assert client.get(f"/api/users/{p['s1'].user_id}").status_code == 200
    assert client.get(f"/api/users/{p['s2'].user_id}").status_code == 404
    assert client.get("/api/users/role/teacher").get_json()["data"] == []


def test_admin_cannot_delete_referenced_user(api):
    client, _, _, p = api
    _login_as(client, p["s1"])
    _submit(client)

    _login_as(client, p["admin"])
    resp = client.delete(f"/api/users/{p['s1'].user_id}")

    assert resp.status_code == 400
    assert client.delete(f"/api/users/{p['t2'].user_id}").status_code == 200


def test_unknown_route_is_json_404(api):
    client, *_ = api

    resp = client.get("/api/nowhere")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_transferred_teacher_loses_review_rights_mid_session(api):
    client, _, activities, p = api
    _login_as(client, p["s1"])
    activity_id = _submit(client).get_json()["data"]["id"]
    _login_as(client, p["t1"])

    admin = client.application.test_client()
    _login_as(admin, p["admin"])
    moved = admin.put(f"/api/users/{p['t1'].user_id}", json={"department": "EE"})
    assert moved.status_code == 200

    resp = client.put(f"/api/activities/{activity_id}/review", json={"status": "approved", "pointsAwarded": 9})

    assert resp.status_code == 404
    assert activities.review_calls == 0


def test_demoted_superadmin_loses_admin_routes_mid_session(api):
    client, users, _, p = api
    deputy = users.add("Deputy", Role.SUPERADMIN, department="CS")
    _login_as(client, deputy)
    assert client.get("/api/users").status_code == 200

    admin = client.application.test_client()
    _login_as(admin, p["admin"])
    assert admin.put(f"/api/users/{deputy.user_id}", json={"role": "teacher"}).status_code == 200

    assert client.get("/api/users").status_code == 403


def test_deleted_user_session_is_dropped(api):
    client, _, _, p = api
    _login_as(client, p["s2"])
    assert client.get("/api/activities").status_code == 200

    admin = client.application.test_client()
    _login_as(admin, p["admin"])
    assert admin.delete(f"/api/users/{p['s2'].user_id}").status_code == 200

    assert client.get("/api/activities").status_code == 401
    with client.session_transaction() as sess:
        assert "user_id" not in sess


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"password": 12345678}, "password"),
        ({"name": 42}, "name"),
        ({"email": ["sana@example.com"]}, "email"),
        ({"department": {"name": "CS"}}, "department"),
        ({"class": 7}, "class"),
        ({"rollNumber": 2001}, "rollNumber"),
        ({"semester": 10**30}, "semester"),
        ({"name": "x" * 121}, "name"),
    ],
)
def test_register_rejects_malformed_fields(api, payload, field):
    client, users, *_ = api
    body = {
        "name": "Nia",
        "email": "nia@example.com",
        "password": "secret1",
        "department": "CS",
        "class": "A",
        "semester": 2,
        "rollNumber": "CS050",
    }
    body.update(payload)
    before = len(users.users)

    resp = client.post("/api/auth/register", json=body)

    assert resp.status_code == 400
    assert resp.get_json()["field"] == field
    assert len(users.users) == before


def test_login_with_non_string_credentials_is_401(api):
    client, *_ = api

    resp = client.post("/api/auth/login", json={"email": 5, "password": ["password123"]})

    assert resp.status_code == 401


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"status": "approved", "feedback": 5}, "feedback"),
        ({"status": "approved", "feedback": "x" * 10001}, "feedback"),
        ({"status": "approved", "pointsAwarded": 10**12}, "pointsAwarded"),
        ({"status": ["approved"]}, "status"),
    ],
)
def test_review_rejects_malformed_payload(api, payload, field):
    client, _, activities, p = api
    _login_as(client, p["s1"])
    activity_id = _submit(client).get_json()["data"]["id"]
    _login_as(client, p["t1"])

    resp = client.put(f"/api/activities/{activity_id}/review", json=payload)

    assert resp.status_code == 400
    assert resp.get_json()["field"] == field
    assert activities.review_calls == 0


@pytest.mark.parametrize(
    "fields, field",
    [
        ({"title": "t" * 256}, "title"),
        ({"eventOrganizer": "o" * 256}, "eventOrganizer"),
    ],
)
def test_submit_rejects_values_wider_than_their_columns(api, tmp_path, fields, field):
    client, _, activities, p = api
    _login_as(client, p["s1"])

    resp = _submit(client, **fields)

    assert resp.status_code == 400
    assert resp.get_json()["field"] == field
    assert activities.rows == {}
    assert not list((tmp_path / "uploads").glob("*"))


def test_admin_update_rejects_oversized_class(api):
    client, _, _, p = api
    _login_as(client, p["admin"])

    resp = client.put(f"/api/users/{p['s1'].user_id}", json={"class": "c" * 61})

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "class"
