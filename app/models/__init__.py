"""
Database models package
"""
from app.models.stack import Stack
from app.models.resource import Resource
from app.models.quiz import Quiz
from app.models.quiz_attempt import QuizAttempt
from app.models.enums import ResourceType, LearningStatus, QuizStatus, QuestionDifficulty

__all__ = [
    "Stack",
    "Resource",
    "Quiz",
    "QuizAttempt",
    "ResourceType",
    "LearningStatus",
    "QuizStatus",
    "QuestionDifficulty",
]
