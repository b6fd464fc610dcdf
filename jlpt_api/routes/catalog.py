"""Public catalog endpoints used by the quiz setup screen."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from jlpt_api.database import get_db
from jlpt_api.models import ChapterResponse, QuestionTypeResponse
from jlpt_api.services import catalog_service

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/chapters", response_model=list[ChapterResponse])
def list_chapters(db: Annotated[DbSession, Depends(get_db)]) -> list[dict[str, object]]:
    """List all chapters with question counts."""
    return catalog_service.list_chapters(db)


@router.get("/types", response_model=list[QuestionTypeResponse])
def list_types(db: Annotated[DbSession, Depends(get_db)]) -> list[dict[str, object]]:
    """List all question types with question counts."""
    return catalog_service.list_question_types(db)
