from datetime import timedelta
from types import SimpleNamespace

from market_warrior.services.unlock_service import (
    REASON_NOT_STARTED,
    REASON_PREVIOUS_DAY,
    TOTAL_DAYS,
    compute_unlock_state,
    is_certificate_eligible,
    unlock_time,
)
from tests.conftest import START


def enrollment(start=START):
    return SimpleNamespace(challenge_start_date=start)


def progress(passed=True, task=True, score=100):
    return SimpleNamespace(quiz_passed=passed, task_completed=task, quiz_score=score, quiz_attempts=1)


def completed_through(day):
    return {d: progress() for d in range(1, day + 1)}


def test_grid_always_has_thirty_ordered_days():
    state = compute_unlock_state(enrollment(), {}, START)
    assert [d.day_number for d in state.days] == list(range(1, TOTAL_DAYS + 1))


def test_day_one_unlocked_once_started():
    state = compute_unlock_state(enrollment(), {}, START)
    assert state.day(1).status == "unlocked"
    assert state.day(2).status == "locked"
    assert state.day(2).reason == REASON_PREVIOUS_DAY
    assert state.day(2).unlocks_at is None


def test_not_started_locks_every_day_regardless_of_progress():
    state = compute_unlock_state(enrollment(start=None), completed_through(5), START)
    assert all(d.status == "locked" for d in state.days)
    assert state.day(1).reason == REASON_NOT_STARTED


def test_previous_day_incomplete_locks_regardless_of_elapsed_time():
    records = completed_through(3)
    records[4] = progress(passed=False, task=False, score=40)
    state = compute_unlock_state(enrollment(), records, START + timedelta(days=60))
    assert state.day(5).status == "locked"
    assert state.day(5).reason == REASON_PREVIOUS_DAY


def test_quiz_passed_without_task_does_not_unlock_next_day():
    records = {1: progress(passed=True, task=False)}
    state = compute_unlock_state(enrollment(), records, START + timedelta(days=2))
    assert state.day(1).status == "unlocked"
    assert state.day(2).status == "locked"


def test_time_lock_reports_exact_unlock_instant():
    now = START + timedelta(hours=23, minutes=59)
    state = compute_unlock_state(enrollment(), completed_through(1), now)
    day2 = state.day(2)
    assert day2.status == "locked"
    assert day2.unlocks_at == START + timedelta(hours=24)
    assert day2.reason == f"unlocks at {day2.unlocks_at.isoformat()}"


def test_day_unlocks_exactly_at_boundary():
    state = compute_unlock_state(enrollment(), completed_through(1), START + timedelta(hours=24))
    assert state.day(2).status == "unlocked"


def test_two_days_elapsed_scenario():
    state = compute_unlock_state(enrollment(), completed_through(2), START + timedelta(hours=48))
    assert state.day(3).status == "unlocked"
    assert state.day(4).status == "locked"
    assert state.day(4).reason == REASON_PREVIOUS_DAY


def test_future_day_time_locked_after_prerequisite():
    state = compute_unlock_state(enrollment(), completed_through(3), START + timedelta(hours=48))
    assert state.day(3).status == "completed"
    assert state.day(4).status == "locked"
    assert state.day(4).unlocks_at == START + timedelta(hours=72)


def test_unlock_is_monotonic_in_time():
    records = completed_through(10)
    earlier = compute_unlock_state(enrollment(), records, START + timedelta(days=3))
    later = compute_unlock_state(enrollment(), records, START + timedelta(days=9))
    for before, after in zip(earlier.days, later.days):
        if before.accessible:
            assert after.accessible


def test_summary_statistics():
    state = compute_unlock_state(enrollment(), completed_through(3), START + timedelta(days=10))
    assert state.completed_days == 3
    assert state.current_day == 4
    assert state.progress_percent == 10


def test_current_day_when_next_day_is_time_locked():
    state = compute_unlock_state(enrollment(), completed_through(2), START + timedelta(hours=30))
    assert state.day(3).status == "locked"
    assert state.current_day == 3


def test_all_days_completed():
    records = completed_through(TOTAL_DAYS)
    state = compute_unlock_state(enrollment(), records, START + timedelta(days=40))
    assert state.completed_days == TOTAL_DAYS
    assert state.current_day == TOTAL_DAYS
    assert state.progress_percent == 100
    assert is_certificate_eligible(records)


def test_certificate_requires_every_day():
    records = completed_through(TOTAL_DAYS)
    records[17] = progress(passed=True, task=False)
    assert not is_certificate_eligible(records)
    assert not is_certificate_eligible(completed_through(29))


def test_naive_start_is_treated_as_utc():
    naive = START.replace(tzinfo=None)
    assert unlock_time(naive, 3) == START + timedelta(days=2)


def test_same_inputs_give_identical_output():
    records = completed_through(4)
    records[5] = progress(passed=True, task=False, score=80)
    now = START + timedelta(days=4, hours=3)

    first = compute_unlock_state(enrollment(), records, now)
    second = compute_unlock_state(enrollment(), records, now)
    assert first == second
    assert [d.to_dict() for d in first.days] == [d.to_dict() for d in second.days]
