import io
import os
from datetime import timedelta

from market_warrior.models import ActivityLog, DayProgress, TaskSubmission
from tests.conftest import ANSWER_KEY, START, auth_headers, complete_days, make_enrollment


def pass_quiz(client, day, user_id="user-1"):
    response = client.post(
        "/quiz/submit",
        json={"day_number": day, "answers": ANSWER_KEY},
        headers=auth_headers(user_id),
    )
    assert response.status_code == 200


def submit_task(client, day, user_id="user-1", **body):
    return client.post(
        "/task/submit",
        json={"day_number": day, **body},
        headers=auth_headers(user_id),
    )


def test_status_for_new_user(client, db, course):
    make_enrollment(db)
    response = client.get("/progress/status", headers=auth_headers("user-1"))
    assert response.status_code == 200

    body = response.json()
    assert len(body["days"]) == 30
    assert body["days"][0]["status"] == "unlocked"
    assert body["days"][1]["status"] == "locked"
    assert body["stats"]["completed_days"] == 0
    assert body["stats"]["current_day"] == 1
    assert body["stats"]["progress_percent"] == 0
    assert body["stats"]["certificate_eligible"] is False


def test_status_requires_payment(client, db):
    make_enrollment(db, paid=False)
    assert client.get("/progress/status", headers=auth_headers("user-1")).status_code == 403


def test_task_requires_passed_quiz(client, db, course):
    make_enrollment(db)
    response = submit_task(client, 1, task_text="My plan")
    assert response.status_code == 403
    assert response.json()["message"] == "quiz not passed"


def test_task_requires_text_or_file(client, db, course):
    make_enrollment(db)
    pass_quiz(client, 1)
    response = submit_task(client, 1, task_text="   ")
    assert response.status_code == 400


def test_quiz_then_task_completes_day_and_unlocks_next(client, db, clock, course):
    make_enrollment(db)
    pass_quiz(client, 1)

    response = submit_task(client, 1, task_text="Risk 1% per trade")
    assert response.status_code == 200
    body = response.json()
    assert body["day_completed"] is True
    assert body["message"] == "Day 1 task submitted!"

    status = client.get("/progress/status", headers=auth_headers("user-1")).json()
    assert status["days"][0]["status"] == "completed"
    assert status["days"][1]["status"] == "locked"
    assert status["days"][1]["unlocks_at"] is not None
    assert status["stats"]["completed_days"] == 1
    assert status["stats"]["current_day"] == 2

    clock.advance(hours=24)
    status = client.get("/progress/status", headers=auth_headers("user-1")).json()
    assert status["days"][1]["status"] == "unlocked"

    actions = {row.action for row in db.query(ActivityLog).filter_by(user_id="user-1")}
    assert {"quiz_submit", "task_submit", "day_completed"} <= actions


def test_resubmitting_task_overwrites(client, db, course):
    make_enrollment(db)
    pass_quiz(client, 1)
    submit_task(client, 1, task_text="first")
    response = submit_task(client, 1, task_text="second")
    assert response.json()["day_completed"] is False

    rows = db.query(TaskSubmission).filter_by(user_id="user-1", day_number=1).all()
    assert len(rows) == 1
    assert rows[0].task_text == "second"


def test_day_content_shows_submitted_task(client, db, course):
    make_enrollment(db)
    pass_quiz(client, 1)
    submit_task(client, 1, file_url="https://files.example.com/chart.png")

    body = client.get("/day/1", headers=auth_headers("user-1")).json()
    assert body["progress"]["task_completed"] is True
    assert body["task_submission"]["file_url"] == "https://files.example.com/chart.png"
    assert body["task_submission"]["status"] == "pending"


def test_completing_day_thirty(client, db, clock, course, sent_emails):
    make_enrollment(db)
    complete_days(db, "user-1", 29)
    clock.now = START + timedelta(days=30)
    pass_quiz(client, 30)

    body = submit_task(client, 30, task_text="Done").json()
    assert body["day_completed"] is True
    assert "completed the 30-Day" in body["message"]
    assert any("completed the 30-Day Challenge" in e["subject"] for e in sent_emails)

    stats = client.get("/progress/status", headers=auth_headers("user-1")).json()["stats"]
    assert stats["completed_days"] == 30
    assert stats["progress_percent"] == 100
    assert stats["certificate_eligible"] is True


def test_upload_stores_file(client, db):
    make_enrollment(db)
    response = client.post(
        "/upload",
        data={"day_number": "3"},
        files={"file": ("chart.png", io.BytesIO(b"\x89PNG fake image"), "image/png")},
        headers=auth_headers("user-1"),
    )
    assert response.status_code == 201

    body = response.json()
    assert body["filename"].startswith("tasks/user-1/day3_")
    assert body["url"].endswith(body["filename"])
    assert os.path.exists(os.path.join(os.environ["UPLOAD_DIR"], *body["filename"].split("/")))


def test_upload_rejects_other_types(client, db):
    make_enrollment(db)
    response = client.post(
        "/upload",
        data={"day_number": "1"},
        files={"file": ("notes.txt", io.BytesIO(b"hello"), "text/plain")},
        headers=auth_headers("user-1"),
    )
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["message"]


def test_reset_progress_clears_days(client, db, course):
    make_enrollment(db, user_id="admin", admin=True)
    make_enrollment(db)
    pass_quiz(client, 1)

    response = client.patch(
        "/admin/users",
        json={"user_id": "user-1", "action": "reset_progress"},
        headers=auth_headers("admin"),
    )
    assert response.status_code == 200
    assert db.query(DayProgress).filter_by(user_id="user-1").count() == 0
