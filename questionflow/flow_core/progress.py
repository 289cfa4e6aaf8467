from __future__ import annotations

import math

from .result_types import ProgressInfo


class ProgressTracker:
    """Progress arithmetic for a questionnaire session."""

    @staticmethod
    def calculate_progress(
        total_questions: int,
        current_index: int,
        answered_questions: int,
        is_completed: bool,
    ) -> ProgressInfo:
        percent_complete = (
            math.floor(answered_questions / total_questions * 100 + 0.5) if total_questions > 0 else 0
        )
        return ProgressInfo(
            current_question=current_index + 1,
            total_questions=total_questions,
            answered_questions=answered_questions,
            percent_complete=percent_complete,
            is_completed=is_completed,
        )

    @staticmethod
    def is_complete(
        current_index: int, total_questions: int, required_questions_answered: bool
    ) -> bool:
        return current_index >= total_questions and required_questions_answered
