"""
Quiz submission service
Loads the answer key, grades, records the attempt and updates progress
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_warrior.errors import DependencyError, NotFoundError
from market_warrior.models import CourseContent, Enrollment, QuizAttempt
from market_warrior.services.activity_service import log_activity
from market_warrior.services.grading_service import GradingResult, grading_service
from market_warrior.services.progress_service import progress_service

logger = logging.getLogger(__name__)


@dataclass
class QuizOutcome:
    """What the transport layer needs to build the response"""
    result: GradingResult
    attempt_number: int
    best_score: int
    day_passed: bool
    day_completed: bool
    message: str
    feedback: Optional[List[Dict[str, Any]]] = field(default=None)


class QuizService:

    def load_answer_key(self, db: Session, day_number: int) -> CourseContent:
        """
        Load the authoritative key for a day

        Raises:
            DependencyError: storage failure (nothing has been written yet)
            NotFoundError: no quiz configured for the day
        """
        try:
            content = db.get(CourseContent, day_number)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to load answer key for day {day_number}: {str(e)}")
            raise DependencyError("Failed to load quiz, please retry")

        if content is None or not content.quiz_answers:
            raise NotFoundError("Quiz not found")
        return content

    def submit(
        self,
        db: Session,
        enrollment: Enrollment,
        day_number: int,
        answers: Sequence[Any],
        now: datetime,
        include_review: bool = False,
    ) -> QuizOutcome:
        """
        Grade a submission and persist the attempt

        - Score kept on DayProgress is the best of all attempts
        - A passed day stays passed; retakes are graded and recorded only
        - Per-question feedback is disclosed when this attempt passed, or on
          explicit review of a day that has already been passed
        """
        content = self.load_answer_key(db, day_number)

        # Raises ValidationError before any write
        result = grading_service.grade_submission(
            day_number,
            answers,
            content.quiz_answers,
            content.quiz_explanations,
        )

        user_id = enrollment.user_id
        try:
            previous_attempts = db.query(func.count(QuizAttempt.id)).filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.day_number == day_number,
            ).scalar() or 0
            attempt_number = previous_attempts + 1

            db.add(QuizAttempt(
                user_id=user_id,
                day_number=day_number,
                answers=list(answers),
                results=[
                    {"question": d.question, "is_correct": d.is_correct}
                    for d in result.details
                ],
                score=result.score,
                passed=result.passed,
                attempt_number=attempt_number,
            ))

            progress = progress_service.get_or_create_day(db, user_id, day_number)
            progress.quiz_attempts = attempt_number
            progress.last_quiz_attempt = now
            progress.quiz_score = max(progress.quiz_score or 0, result.score)
            if result.passed:
                progress.quiz_completed = True
                progress.quiz_passed = True

            day_completed = progress_service.complete_day_if_ready(db, enrollment, progress, now)

            log_activity(db, user_id, "quiz_submit", {
                "day": day_number,
                "score": result.score,
                "passed": result.passed,
                "attempt": attempt_number,
            })

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record quiz attempt for {user_id} day {day_number}: {str(e)}")
            raise DependencyError("Failed to submit quiz, please retry")

        logger.info(
            f"Quiz attempt saved: user={user_id}, day={day_number}, "
            f"attempt={attempt_number}, score={result.score}, best={progress.quiz_score}"
        )

        disclose = result.passed or (include_review and progress.quiz_passed)
        feedback = [d.to_dict() for d in result.details] if disclose else None

        return QuizOutcome(
            result=result,
            attempt_number=attempt_number,
            best_score=progress.quiz_score,
            day_passed=progress.quiz_passed,
            day_completed=day_completed,
            message=grading_service.result_message(result),
            feedback=feedback,
        )


# Global instance
quiz_service = QuizService()
