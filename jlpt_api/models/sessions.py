"""Session-related Pydantic models."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class SessionCreate(BaseModel):
    """Model for creating a session: either filters or a preset."""

    typeId: int | None = None
    chapterIds: list[int] | None = None
    limit: int | None = None
    preset: Literal["mixed_chapter"] | None = None


class SessionCreated(BaseModel):
    sessionId: str
    totalQuestions: int


class AnswerSubmit(BaseModel):
    """Model for answer submission. Missing answerId is reported as 400."""

    answerId: int | None = None
    questionIndex: int | str | None = None


class AnswerOption(BaseModel):
    id: int
    content: str
    label: str


class QuestionPayload(BaseModel):
    id: int
    content: str
    typeId: int
    type: str | None = None
    typeJa: str | None = None
    answers: list[AnswerOption]


class PassageContext(BaseModel):
    """Passage shown alongside a reading question."""

    content: str
    title: str | None = None
    currentInPassage: int
    totalInPassage: int


class AnswerState(BaseModel):
    """Recorded outcome of an already answered question."""

    userAnswerId: int
    isCorrect: bool
    correctAnswerId: int | None = None
    explanation: str | None = None


class QuestionView(BaseModel):
    sessionId: str
    currentIndex: int
    totalQuestions: int
    completed: bool
    question: QuestionPayload
    passage: PassageContext | None = None
    answer: AnswerState | None = None


class AnswerResult(BaseModel):
    isCorrect: bool
    correctAnswerId: int | None = None
    correctAnswerContent: str | None = None
    explanation: str | None = None
    hasNext: bool
    nextIndex: int | None = None
    answeredCount: int
    totalQuestions: int
    completed: bool


class QuestionStatus(BaseModel):
    index: int
    answered: bool
    isCorrect: bool


class SessionSummary(BaseModel):
    """Progress overview used to render a question map."""

    sessionId: str
    totalQuestions: int
    answeredQuestions: int
    completed: bool
    currentIndex: int
    firstUnansweredIndex: int | None = None
    questions: list[QuestionStatus] = Field(default_factory=list)


class ResultDetail(BaseModel):
    questionContent: str
    type: str | None = None
    typeJa: str | None = None
    userAnswer: str | None = None
    correctAnswer: str | None = None
    isCorrect: bool
    explanation: str | None = None


class SessionResults(BaseModel):
    sessionId: str
    completed: bool
    totalQuestions: int
    answeredQuestions: int
    correctAnswers: int
    percentage: int
    startedAt: datetime
    details: list[ResultDetail] = Field(default_factory=list)
