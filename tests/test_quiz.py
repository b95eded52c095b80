from datetime import timedelta

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from market_warrior.models import CourseContent, DayProgress, QuizAttempt
from tests.conftest import ANSWER_KEY, START, auth_headers, complete_days, make_enrollment

WRONG = ["x"] * len(ANSWER_KEY)
THREE_RIGHT = ANSWER_KEY[:3] + ["x", "x"]


def submit(client, day, answers, user_id="user-1", **extra):
    return client.post(
        "/quiz/submit",
        json={"day_number": day, "answers": answers, **extra},
        headers=auth_headers(user_id),
    )


def test_failed_attempt_is_recorded_without_feedback(client, db, course):
    make_enrollment(db)
    response = submit(client, 1, WRONG)
    assert response.status_code == 200

    body = response.json()
    assert body["score"] == 0
    assert body["passed"] is False
    assert body["attempt_number"] == 1
    assert body["threshold"] == 60
    assert "feedback" not in body

    progress = db.query(DayProgress).filter_by(user_id="user-1", day_number=1).one()
    assert progress.quiz_attempts == 1
    assert progress.quiz_passed is False


def test_passing_attempt_returns_feedback(client, db, course):
    make_enrollment(db)
    body = submit(client, 1, THREE_RIGHT).json()

    assert body["score"] == 60
    assert body["passed"] is True
    assert len(body["feedback"]) == len(ANSWER_KEY)
    assert body["feedback"][3]["correct_answer"] == ANSWER_KEY[3]
    assert body["feedback"][0]["explanation"] == "Because 1"


def test_best_score_kept_and_pass_never_regresses(client, db, course):
    make_enrollment(db)
    submit(client, 1, ANSWER_KEY)
    body = submit(client, 1, WRONG).json()

    assert body["passed"] is False
    assert body["best_score"] == 100
    assert body["attempt_number"] == 2

    db.expire_all()
    progress = db.query(DayProgress).filter_by(user_id="user-1", day_number=1).one()
    assert progress.quiz_passed is True
    assert progress.quiz_score == 100
    assert progress.quiz_attempts == 2
    assert db.query(QuizAttempt).filter_by(user_id="user-1", day_number=1).count() == 2


def test_review_of_passed_day_discloses_feedback(client, db, course):
    make_enrollment(db)
    submit(client, 1, ANSWER_KEY)

    assert "feedback" not in submit(client, 1, WRONG).json()
    assert len(submit(client, 1, WRONG, include_review=True).json()["feedback"]) == len(ANSWER_KEY)


def test_review_before_passing_discloses_nothing(client, db, course):
    make_enrollment(db)
    assert "feedback" not in submit(client, 1, WRONG, include_review=True).json()


def test_answer_count_mismatch_writes_nothing(client, db, course):
    make_enrollment(db)
    response = submit(client, 1, ["a", "b"])
    assert response.status_code == 400
    assert "expected 5 answers" in response.json()["message"]
    assert db.query(QuizAttempt).count() == 0
    assert db.query(DayProgress).count() == 0


def test_invalid_day_number_is_400(client, db, course):
    make_enrollment(db)
    assert submit(client, 31, ANSWER_KEY).status_code == 400


def test_locked_day_cannot_be_submitted(client, db, course):
    make_enrollment(db)
    response = submit(client, 2, ANSWER_KEY)
    assert response.status_code == 403
    assert response.json()["reason"] == "complete previous day first"


def test_unpaid_user_cannot_submit(client, db, course):
    make_enrollment(db, paid=False)
    assert submit(client, 1, ANSWER_KEY).status_code == 403


def test_missing_quiz_is_404(client, db):
    make_enrollment(db)
    assert submit(client, 1, ANSWER_KEY).status_code == 404


def test_quiz_after_task_completes_day(client, db, clock, course, sent_emails):
    make_enrollment(db)
    complete_days(db, "user-1", 29)
    db.add(DayProgress(user_id="user-1", day_number=30, quiz_passed=False, task_completed=True, quiz_attempts=0))
    db.commit()
    clock.now = START + timedelta(days=29)

    body = submit(client, 30, ANSWER_KEY).json()
    assert body["passed"] is True

    db.expire_all()
    progress = db.query(DayProgress).filter_by(user_id="user-1", day_number=30).one()
    assert progress.completed_at is not None
    assert sent_emails[-1]["subject"].startswith("Congratulations!")
    assert sent_emails[-1]["to"] == "user-1@example.com"


def test_answer_key_load_failure_is_retryable_and_writes_nothing(client, db, course, monkeypatch):
    make_enrollment(db)
    original_get = Session.get

    def failing_get(self, entity, ident, **kwargs):
        if entity is CourseContent:
            raise OperationalError("SELECT course_content", {}, Exception("connection lost"))
        return original_get(self, entity, ident, **kwargs)

    monkeypatch.setattr(Session, "get", failing_get)

    response = submit(client, 1, ANSWER_KEY)
    assert response.status_code == 500
    assert response.json()["error"] == "dependency_error"

    monkeypatch.setattr(Session, "get", original_get)
    assert db.query(QuizAttempt).count() == 0
    assert db.query(DayProgress).count() == 0
