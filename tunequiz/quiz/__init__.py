"""
Quiz module for tunequiz.

Turns a track pool into multiple-choice questions and serves them.
"""

from tunequiz.quiz.models import QuizQuestion
from tunequiz.quiz.generator import QuestionGenerator
from tunequiz.quiz.service import (
    DIFFICULTY_QUESTION_COUNTS,
    CategoryStats,
    CategorySummary,
    QuizError,
    QuizResponse,
    QuizService,
    ValidationResult,
)

__all__ = [
    "QuizQuestion",
    "QuestionGenerator",
    "QuizService",
    "QuizResponse",
    "QuizError",
    "ValidationResult",
    "CategorySummary",
    "CategoryStats",
    "DIFFICULTY_QUESTION_COUNTS",
]
