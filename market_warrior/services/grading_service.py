"""
Quiz grading service
Server-side scoring against the stored answer key
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from market_warrior.errors import ValidationError
from market_warrior.services.unlock_service import TOTAL_DAYS

logger = logging.getLogger(__name__)

PASS_THRESHOLD_PERCENT = 60


@dataclass(frozen=True)
class QuestionResult:
    """Grading details for a single question"""
    question: int  # 1-based
    your_answer: Any
    correct_answer: str
    is_correct: bool
    explanation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "your_answer": self.your_answer,
            "correct_answer": self.correct_answer,
            "is_correct": self.is_correct,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class GradingResult:
    score: int
    passed: bool
    correct_count: int
    total_questions: int
    correctness: List[bool] = field(default_factory=list)
    details: List[QuestionResult] = field(default_factory=list)


def round_half_up_percent(correct: int, total: int) -> int:
    """round(100 * correct / total) with .5 rounded up, in integer arithmetic"""
    return (200 * correct + total) // (2 * total)


class GradingService:
    """
    Service for grading quiz submissions

    Strategy:
    - Answers are aligned with the key by question index
    - Comparison is case-insensitive and ignores surrounding whitespace
    - Score is an integer percentage; pass at PASS_THRESHOLD_PERCENT
    """

    PASS_THRESHOLD = PASS_THRESHOLD_PERCENT

    def grade_submission(
        self,
        day_number: int,
        submitted_answers: Sequence[Any],
        answer_key: Sequence[str],
        explanations: Optional[Sequence[str]] = None,
    ) -> GradingResult:
        """
        Grade a complete quiz submission

        Args:
            day_number: Day the quiz belongs to (1-30)
            submitted_answers: User's answers in question order
            answer_key: Correct option ids, loaded from trusted storage
            explanations: Optional per-question explanation text

        Returns:
            GradingResult with score, pass flag and per-question detail

        Raises:
            ValidationError: day out of range or answer count mismatch
        """
        if not 1 <= day_number <= TOTAL_DAYS:
            raise ValidationError("Invalid day number")

        total = len(answer_key)
        if total == 0:
            raise ValidationError("No questions for this day")

        if len(submitted_answers) != total:
            raise ValidationError(
                f"Malformed submission: expected {total} answers, got {len(submitted_answers)}"
            )

        explanations = list(explanations or [])
        details = []
        correctness = []

        for index, (given, expected) in enumerate(zip(submitted_answers, answer_key)):
            is_correct = self._normalize(given) == self._normalize(expected)
            correctness.append(is_correct)
            details.append(QuestionResult(
                question=index + 1,
                your_answer=given,
                correct_answer=expected,
                is_correct=is_correct,
                explanation=explanations[index] if index < len(explanations) else None,
            ))

        correct_count = sum(correctness)
        score = round_half_up_percent(correct_count, total)
        passed = score >= self.PASS_THRESHOLD

        logger.info(f"Quiz graded: day={day_number}, {correct_count}/{total}, score={score}, passed={passed}")

        return GradingResult(
            score=score,
            passed=passed,
            correct_count=correct_count,
            total_questions=total,
            correctness=correctness,
            details=details,
        )

    def _normalize(self, answer: Any) -> Optional[str]:
        if answer is None:
            return None
        return str(answer).strip().lower()

    def result_message(self, result: GradingResult) -> str:
        """Generate the user-facing message for a graded attempt"""
        if result.passed:
            return f"Congratulations! You passed with {result.score}%!"
        return (
            f"You scored {result.score}%. You need {self.PASS_THRESHOLD}% to pass. "
            "Review the lesson and try again!"
        )


# Global instance
grading_service = GradingService()
