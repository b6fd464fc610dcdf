"""Training session endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session as DbSession

from jlpt_api.database import get_db
from jlpt_api.models import (
    AnswerResult,
    AnswerSubmit,
    QuestionView,
    SessionCreate,
    SessionCreated,
    SessionResults,
    SessionSummary,
)
from jlpt_api.services import session_builder, session_runner

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.post("", response_model=SessionCreated)
def create_session(
    payload: SessionCreate,
    db: Annotated[DbSession, Depends(get_db)],
) -> SessionCreated:
    """Create a filtered or preset training session."""
    session = session_builder.create_session(
        db,
        type_id=payload.typeId,
        chapter_ids=payload.chapterIds,
        limit=payload.limit,
        preset=payload.preset,
    )
    return SessionCreated(sessionId=session.id, totalQuestions=session.total_questions)


@router.get("/{session_id}", response_model=QuestionView)
def get_session_question(
    session_id: str,
    db: Annotated[DbSession, Depends(get_db)],
    index: str | None = Query(None),
) -> QuestionView:
    """Get the question at index (current question when omitted)."""
    return session_runner.get_question_at(db, session_id, index)


@router.post("/{session_id}/answer", response_model=AnswerResult)
def submit_answer(
    session_id: str,
    payload: AnswerSubmit,
    db: Annotated[DbSession, Depends(get_db)],
) -> AnswerResult:
    """Submit the answer for a question. Each question can be answered once."""
    return session_runner.submit_answer(
        db, session_id, payload.answerId, payload.questionIndex
    )


@router.get("/{session_id}/summary", response_model=SessionSummary)
def get_session_summary(
    session_id: str,
    db: Annotated[DbSession, Depends(get_db)],
) -> SessionSummary:
    """Get session progress overview."""
    return session_runner.get_summary(db, session_id)


@router.get("/{session_id}/results", response_model=SessionResults)
def get_session_results(
    session_id: str,
    db: Annotated[DbSession, Depends(get_db)],
) -> SessionResults:
    """Get session results."""
    return session_runner.get_results(db, session_id)
