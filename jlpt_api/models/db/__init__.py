"""Database models."""
from jlpt_api.models.db.catalog import Answer, Chapter, Question, QuestionType, ReadingPassage
from jlpt_api.models.db.session import SessionQuestion, TrainingSession

__all__ = [
    "Answer",
    "Chapter",
    "Question",
    "QuestionType",
    "ReadingPassage",
    "SessionQuestion",
    "TrainingSession",
]
