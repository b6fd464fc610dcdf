"""Catalog Pydantic models (chapters, types, passages, questions)."""
from pydantic import BaseModel, Field


# Request models


class ChapterCreate(BaseModel):
    name: str = Field(..., min_length=1)


class ChapterUpdate(BaseModel):
    name: str = Field(..., min_length=1)


class PassageCreate(BaseModel):
    chapterId: int
    title: str | None = None
    content: str = Field(..., min_length=1)


class AnswerInput(BaseModel):
    content: str
    isCorrect: bool = False


class QuestionCreate(BaseModel):
    """Model for creating a question with its answers."""

    chapterId: int
    typeId: int
    passageId: int | None = None
    content: str = Field(..., min_length=1)
    explanation: str | None = None
    orderInPassage: int | None = None
    answers: list[AnswerInput] = Field(default_factory=list)


class QuestionUpdate(BaseModel):
    """Model for editing a question. Answers are replaced positionally when given."""

    content: str = Field(..., min_length=1)
    explanation: str | None = None
    answers: list[AnswerInput] | None = None


# Response models


class ChapterResponse(BaseModel):
    id: int
    name: str
    order_num: int
    question_count: int = 0


class QuestionTypeResponse(BaseModel):
    id: int
    name: str
    name_ja: str | None = None
    description: str | None = None
    question_count: int = 0


class PassageResponse(BaseModel):
    id: int
    chapter_id: int
    chapter_name: str | None = None
    title: str | None = None
    content: str
    question_count: int = 0


class AnswerResponse(BaseModel):
    id: int
    question_id: int
    content: str
    is_correct: bool

    class Config:
        from_attributes = True


class QuestionResponse(BaseModel):
    """Admin view of a question with chapter/type/passage labels."""

    id: int
    chapter_id: int
    type_id: int
    passage_id: int | None = None
    content: str
    order_in_passage: int
    explanation: str | None = None
    chapter_name: str | None = None
    type_name: str | None = None
    passage_title: str | None = None
    answers: list[AnswerResponse] = Field(default_factory=list)


class CreatedResponse(BaseModel):
    id: int


class SuccessResponse(BaseModel):
    success: bool = True
