"""
Quiz grading service
Multiple-choice exact match against the stored answer key
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, List, Tuple

from app.schemas.quiz import AnswerSubmission

logger = logging.getLogger(__name__)


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, .5 going up (Python's round() goes to even)"""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(part: int, total: int) -> int:
    """round_half_up(100 * part / total); 0 when total is 0"""
    if total <= 0:
        return 0
    return round_half_up(Decimal(100 * part) / Decimal(total))


class GradingService:
    """
    Service for grading quiz submissions

    Strategy:
    - Answers are matched to questions by position
    - Correct when the selected index equals the stored correct index
    - Score = round_half_up(100 * correct / total questions)
    """

    def grade_attempt(
        self,
        questions: List[Dict[str, Any]],
        answers: List[AnswerSubmission]
    ) -> Tuple[List[Dict[str, Any]], int, int]:
        """
        Grade a complete quiz submission

        Args:
            questions: Stored question dictionaries, in quiz order
            answers: One submission per question, same order

        Returns:
            Tuple of (graded_answers, correct_count, score)
        """
        if len(answers) != len(questions):
            raise ValueError(
                f"Expected {len(questions)} answers, got {len(answers)}"
            )

        graded = []
        correct_count = 0

        for index, (question, answer) in enumerate(zip(questions, answers)):
            is_correct = answer.selected_answer == question["correct_answer"]
            if is_correct:
                correct_count += 1

            graded.append({
                "question_index": index,
                "selected_answer": answer.selected_answer,
                "is_correct": is_correct,
                "time_spent": answer.time_spent or 0,
            })

        score = percentage(correct_count, len(questions))

        logger.info(f"Attempt graded: {correct_count}/{len(questions)} ({score}%)")

        return graded, correct_count, score


# Global instance
grading_service = GradingService()
