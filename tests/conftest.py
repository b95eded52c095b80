import os
import tempfile
import time
from datetime import datetime, timedelta, timezone

# Settings are read at import time; configure before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-that-is-long-enough-for-hs256"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["STRIPE_PRICE_ID"] = "price_test_challenge"
os.environ["RESEND_API_KEY"] = "re_test_key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="mw-uploads-")

import jwt
import pytest
import resend
from fastapi.testclient import TestClient

from market_warrior.api.deps import get_now
from market_warrior.config import get_settings
from market_warrior.database import Base, SessionLocal, engine
from market_warrior.main import app
from market_warrior.models import CourseContent, DayProgress, Enrollment

QUESTIONS_PER_DAY = 5
ANSWER_KEY = ["a", "b", "c", "d", "a"]

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class Clock:
    """Mutable server time shared by the app and the test"""

    def __init__(self, now: datetime):
        self.now = now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    clock = Clock(START)
    app.dependency_overrides[get_now] = lambda: clock.now
    yield clock
    app.dependency_overrides.pop(get_now, None)


@pytest.fixture
def client(clock):
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture outgoing email instead of calling Resend"""
    sent = []

    def fake_send(params):
        sent.append(params)
        return {"id": f"email_{len(sent)}"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    return sent


def make_token(user_id: str, email: str = None, full_name: str = None, expires_in: int = 3600) -> str:
    claims = {
        "sub": user_id,
        "aud": "authenticated",
        "email": email or f"{user_id}@example.com",
        "exp": int(time.time()) + expires_in,
        "user_metadata": {"full_name": full_name} if full_name else {},
    }
    return jwt.encode(claims, get_settings().SUPABASE_JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: str, **kwargs) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}


def make_enrollment(
    db,
    user_id: str = "user-1",
    paid: bool = True,
    terms: bool = True,
    started: datetime = START,
    admin: bool = False,
    full_name: str = "Test Trader",
) -> Enrollment:
    enrollment = Enrollment(
        user_id=user_id,
        email=f"{user_id}@example.com",
        full_name=full_name,
        is_paid=paid,
        is_admin=admin,
        agreed_to_terms=terms,
        challenge_start_date=started,
        access_expires_at=started + timedelta(days=120) if started else None,
        device_ids=[],
    )
    db.add(enrollment)
    db.commit()
    return enrollment


def complete_days(db, user_id: str, through_day: int, score: int = 100) -> None:
    """Mark days 1..through_day as quiz-passed and task-completed"""
    for day in range(1, through_day + 1):
        db.add(DayProgress(
            user_id=user_id,
            day_number=day,
            quiz_completed=True,
            quiz_passed=True,
            quiz_score=score,
            quiz_attempts=1,
            task_completed=True,
            completed_at=START,
        ))
    db.commit()


@pytest.fixture
def course(db):
    for day in range(1, 31):
        db.add(CourseContent(
            day_number=day,
            title=f"Day {day}: Market Basics",
            content_html=f"<p>Lesson {day}</p>",
            youtube_video_id=None,
            has_video=False,
            quiz_questions=[
                {"question": f"Question {i + 1}", "options": {"a": "A", "b": "B", "c": "C", "d": "D"}}
                for i in range(QUESTIONS_PER_DAY)
            ],
            quiz_answers=list(ANSWER_KEY),
            quiz_explanations=[f"Because {i + 1}" for i in range(QUESTIONS_PER_DAY)],
            task_instructions="Write down your trading plan.",
        ))
    db.commit()
