from __future__ import annotations

import io
from datetime import date
from urllib.parse import parse_qs, urlparse

import pytest

from src.credilocker.credilocker.cocurricular.model import AttendanceTally
from src.credilocker.credilocker.core.enums import DocumentType, Role
from src.credilocker.credilocker.dashboard.service import StudentDashboard
from src.credilocker.credilocker.main import create_app
from src.credilocker.credilocker.students.model import Student
from src.credilocker.credilocker.users.model import SessionUser
from tests.fakes import TEACHER, student_user


@pytest.fixture
def app(monkeypatch, tmp_path):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("STORAGE_ROOT", str(tmp_path))
    monkeypatch.setenv("AUTO_INIT_DB", "0")
    monkeypatch.setenv("AUTO_SEED_DB", "0")
    return create_app()


@pytest.fixture
def container(app):
    return app.extensions["credilocker"]


def _login(client, user):
    with client.session_transaction() as sess:
        sess.update(user.to_session())


def test_login_page_renders(app):
    resp = app.test_client().get("/")

    assert resp.status_code == 200
    assert b"Sign in" in resp.data


@pytest.mark.parametrize("path", ["/dashboard", "/field-project", "/manage-classes", "/attendance"])
def test_anonymous_users_are_sent_to_login(app, path):
    resp = app.test_client().get(path)

    assert resp.status_code == 302
    assert urlparse(resp.headers["Location"]).path == "/"


@pytest.mark.parametrize(
    "path",
    ["/manage-classes", "/attendance", "/reports/cep.xlsx?class=FYIT", "/api/dashboard/activity/1"],
)
def test_students_get_403_on_teacher_pages(app, path):
    client = app.test_client()
    _login(client, student_user())

    resp = client.get(path)

    assert resp.status_code == 403
    assert b"access" in resp.data


def test_student_dashboard_shows_only_student_navigation(app, container, monkeypatch):
    data = StudentDashboard(
        field_counts={t: 0 for t in DocumentType},
        upcoming_activities=2,
        attendance=AttendanceTally(present=1, absent=0),
        cep_requirement=None,
        cep_hours=0,
        cep_progress=0,
    )
    monkeypatch.setattr(container.dashboard_service, "for_student", lambda user: data)
    client = app.test_client()
    _login(client, student_user())

    resp = client.get("/dashboard")

    assert resp.status_code == 200
    assert b"Field Project" in resp.data
    assert b"Manage Classes" not in resp.data


def test_teacher_sees_manage_classes(app, container, monkeypatch):
    students = [Student(uid="24BIT001", name="Asha Patel", email="a@x.edu", class_name="FYIT", semester=1)]
    monkeypatch.setattr(container.student_service, "list_students", lambda **kwargs: students)
    client = app.test_client()
    _login(client, TEACHER)

    resp = client.get("/manage-classes")

    assert resp.status_code == 200
    assert b"Asha Patel" in resp.data


def test_unknown_report_kind_is_404(app):
    client = app.test_client()
    _login(client, TEACHER)

    assert client.get("/reports/payroll.xlsx?class=FYIT").status_code == 404


def test_signed_download(app, container):
    path = container.storage.upload("cep/pictures/p.png", io.BytesIO(b"png-bytes"))
    url = container.storage.signed_url(path, 120)
    client = app.test_client()

    ok = client.get(url)
    assert ok.status_code == 200
    assert ok.data == b"png-bytes"
    ok.close()

    token = parse_qs(urlparse(url).query)["token"][0]
    assert client.get(f"/storage/v1/object/sign/{container.storage.bucket}/cep/pictures/other.png?token={token}").status_code == 403
    assert client.get(f"/storage/v1/object/sign/other-bucket/{path}?token={token}").status_code == 404
    assert client.get(f"/storage/v1/object/sign/{container.storage.bucket}/{path}").status_code == 403


def test_logout_clears_session(app):
    client = app.test_client()
    _login(client, student_user())

    client.get("/logout")

    assert client.get("/dashboard").status_code == 302


def _flashes(client):
    with client.session_transaction() as sess:
        return [message for _category, message in sess.get("_flashes", [])]


def test_initial_password_holds_student_on_change_page(app):
    client = app.test_client()
    _login(client, SessionUser(user_id="24BIT001", name="Asha Patel", role=Role.STUDENT, class_name="FYIT",
                               must_change_password=True))

    resp = client.get("/field-project")

    assert resp.status_code == 302
    assert urlparse(resp.headers["Location"]).path == "/account/password"
    assert client.get("/account/password").status_code == 200


def test_field_project_delete_redirect_ignores_referrer(app, container, monkeypatch):
    deleted = []
    monkeypatch.setattr(container.field_project_service, "delete_submission", lambda user, sid: deleted.append(sid))
    client = app.test_client()
    _login(client, TEACHER)

    resp = client.post("/field-project/3/delete?class=FYIT", headers={"Referer": "http://elsewhere.example/"})

    location = urlparse(resp.headers["Location"])
    assert deleted == [3]
    assert location.netloc in ("", "localhost")
    assert location.path == "/field-project"
    assert parse_qs(location.query) == {"class": ["FYIT"]}


def test_attendance_form_maps_status_fields_to_uids(app, container, monkeypatch):
    seen = {}

    def mark_attendance(user, *, activity_id, marks):
        seen.update(activity_id=activity_id, marks=marks)
        return len(marks)

    monkeypatch.setattr(container.cocurricular_service, "mark_attendance", mark_attendance)
    client = app.test_client()
    _login(client, TEACHER)

    resp = client.post(
        "/attendance/7",
        data={"status_24BIT001": "present", "status_24BIT002": "absent", "csrf": "ignored"},
    )

    assert resp.status_code == 302
    assert parse_qs(urlparse(resp.headers["Location"]).query) == {"activity": ["7"]}
    assert seen == {"activity_id": 7, "marks": {"24BIT001": "present", "24BIT002": "absent"}}
    assert "Attendance saved for 2 student(s)." in _flashes(client)


def test_activity_form_sends_every_checked_class(app, container, monkeypatch):
    seen = {}

    def save_activity(user, **kwargs):
        seen.update(kwargs)
        return 1

    monkeypatch.setattr(container.cocurricular_service, "save_activity", save_activity)
    client = app.test_client()
    _login(client, TEACHER)

    client.post(
        "/co-curricular/activities",
        data={
            "activity_name": "Blood donation drive",
            "date": "2026-03-14",
            "time": "10:30",
            "venue": "Main hall",
            "assigned_class": ["FYIT", "SYSD"],
            "cc_points": "5",
        },
    )

    assert seen["classes"] == ["FYIT", "SYSD"]
    assert seen["activity_date"] == date(2026, 3, 14)
    assert seen["cc_points"] == 5
    assert seen["activity_id"] is None


def test_roster_upload_decodes_utf8_with_bom(app, container, monkeypatch):
    seen = []
    monkeypatch.setattr(
        container.student_service, "import_csv", lambda *, current_role, text: seen.append(text) or 1
    )
    client = app.test_client()
    _login(client, TEACHER)

    csv_bytes = "uid,email,name,class\n24BIT009,z@x.edu,Zoë D'Souza,FYIT\n".encode("utf-8-sig")
    resp = client.post(
        "/manage-classes/import?class=FYIT",
        data={"file": (io.BytesIO(csv_bytes), "roster.csv")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 302
    assert seen == ["uid,email,name,class\n24BIT009,z@x.edu,Zoë D'Souza,FYIT\n"]
    assert "Imported 1 student(s)." in _flashes(client)


def test_roster_upload_rejects_non_utf8(app, container, monkeypatch):
    seen = []
    monkeypatch.setattr(container.student_service, "import_csv", lambda **kwargs: seen.append(kwargs))
    client = app.test_client()
    _login(client, TEACHER)

    client.post(
        "/manage-classes/import",
        data={"file": (io.BytesIO(b"uid,name\n\xff\xfe\x00"), "roster.csv")},
        content_type="multipart/form-data",
    )

    assert seen == []
    assert "CSV file must be UTF-8 encoded" in _flashes(client)
