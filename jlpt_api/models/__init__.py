"""Pydantic models."""
from jlpt_api.models.catalog import (
    AnswerInput,
    AnswerResponse,
    ChapterCreate,
    ChapterResponse,
    ChapterUpdate,
    CreatedResponse,
    PassageCreate,
    PassageResponse,
    QuestionCreate,
    QuestionResponse,
    QuestionTypeResponse,
    QuestionUpdate,
    SuccessResponse,
)
from jlpt_api.models.sessions import (
    AnswerResult,
    AnswerSubmit,
    QuestionView,
    SessionCreate,
    SessionCreated,
    SessionResults,
    SessionSummary,
)

__all__ = [
    "AnswerInput",
    "AnswerResponse",
    "AnswerResult",
    "AnswerSubmit",
    "ChapterCreate",
    "ChapterResponse",
    "ChapterUpdate",
    "CreatedResponse",
    "PassageCreate",
    "PassageResponse",
    "QuestionCreate",
    "QuestionResponse",
    "QuestionTypeResponse",
    "QuestionUpdate",
    "QuestionView",
    "SessionCreate",
    "SessionCreated",
    "SessionResults",
    "SessionSummary",
    "SuccessResponse",
]
