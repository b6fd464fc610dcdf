"""Admin endpoints for editing the catalog."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from jlpt_api.database import get_db
from jlpt_api.models import (
    ChapterCreate,
    ChapterResponse,
    ChapterUpdate,
    CreatedResponse,
    PassageCreate,
    PassageResponse,
    QuestionCreate,
    QuestionResponse,
    QuestionUpdate,
    SuccessResponse,
)
from jlpt_api.services import catalog_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


# Chapters


@router.post("/chapters", response_model=ChapterResponse)
def create_chapter(
    payload: ChapterCreate,
    db: Annotated[DbSession, Depends(get_db)],
) -> ChapterResponse:
    """Create a new chapter."""
    chapter = catalog_service.create_chapter(db, payload.name)
    return ChapterResponse(id=chapter.id, name=chapter.name, order_num=chapter.order_num)


@router.put("/chapters/{chapter_id}", response_model=SuccessResponse)
def update_chapter(
    chapter_id: int,
    payload: ChapterUpdate,
    db: Annotated[DbSession, Depends(get_db)],
) -> SuccessResponse:
    """Rename a chapter."""
    catalog_service.update_chapter(db, chapter_id, payload.name)
    return SuccessResponse()


@router.delete("/chapters/{chapter_id}", response_model=SuccessResponse)
def delete_chapter(
    chapter_id: int,
    db: Annotated[DbSession, Depends(get_db)],
) -> SuccessResponse:
    """Delete a chapter. Refused while it still has questions."""
    catalog_service.delete_chapter(db, chapter_id)
    return SuccessResponse()


# Reading passages


@router.get("/passages", response_model=list[PassageResponse])
def list_passages(db: Annotated[DbSession, Depends(get_db)]) -> list[dict[str, object]]:
    """List all reading passages."""
    return catalog_service.list_passages(db)


@router.post("/passages", response_model=PassageResponse)
def create_passage(
    payload: PassageCreate,
    db: Annotated[DbSession, Depends(get_db)],
) -> PassageResponse:
    """Create a reading passage."""
    passage = catalog_service.create_passage(
        db, payload.chapterId, payload.content, payload.title
    )
    return PassageResponse(
        id=passage.id,
        chapter_id=passage.chapter_id,
        title=passage.title,
        content=passage.content,
    )


@router.delete("/passages/{passage_id}", response_model=SuccessResponse)
def delete_passage(
    passage_id: int,
    db: Annotated[DbSession, Depends(get_db)],
) -> SuccessResponse:
    """Delete a passage with its questions and answers."""
    catalog_service.delete_passage(db, passage_id)
    return SuccessResponse()


# Questions


@router.get("/questions", response_model=list[QuestionResponse])
def list_questions(db: Annotated[DbSession, Depends(get_db)]) -> list[dict[str, object]]:
    """List all questions with answers."""
    return [
        catalog_service.question_to_dict(question)
        for question in catalog_service.list_questions(db)
    ]


@router.get("/questions/{question_id}", response_model=QuestionResponse)
def get_question(
    question_id: int,
    db: Annotated[DbSession, Depends(get_db)],
) -> dict[str, object]:
    """Get a single question with answers."""
    return catalog_service.question_to_dict(catalog_service.get_question(db, question_id))


@router.post("/questions", response_model=CreatedResponse)
def create_question(
    payload: QuestionCreate,
    db: Annotated[DbSession, Depends(get_db)],
) -> CreatedResponse:
    """Create a question with its answers."""
    question = catalog_service.create_question(
        db,
        chapter_id=payload.chapterId,
        type_id=payload.typeId,
        content=payload.content,
        answers=payload.answers,
        passage_id=payload.passageId,
        explanation=payload.explanation,
        order_in_passage=payload.orderInPassage,
    )
    return CreatedResponse(id=question.id)


@router.put("/questions/{question_id}", response_model=SuccessResponse)
def update_question(
    question_id: int,
    payload: QuestionUpdate,
    db: Annotated[DbSession, Depends(get_db)],
) -> SuccessResponse:
    """Update question text, explanation and answers."""
    catalog_service.update_question(
        db,
        question_id,
        content=payload.content,
        explanation=payload.explanation,
        answers=payload.answers,
    )
    return SuccessResponse()


@router.delete("/questions/{question_id}", response_model=SuccessResponse)
def delete_question(
    question_id: int,
    db: Annotated[DbSession, Depends(get_db)],
) -> SuccessResponse:
    """Delete a question and its answers."""
    catalog_service.delete_question(db, question_id)
    return SuccessResponse()
