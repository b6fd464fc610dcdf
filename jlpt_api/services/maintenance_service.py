"""One-off administrative operations on the catalog."""
import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session as DBSession

from jlpt_api.errors import ConflictError, NotFoundError
from jlpt_api.models.db.catalog import Answer, Chapter, Question, ReadingPassage
from jlpt_api.models.db.session import SessionQuestion, TrainingSession

logger = logging.getLogger(__name__)


def find_chapter_by_name(db: DBSession, chapter_name: str) -> Chapter:
    """Chapter with this exact name; duplicates are refused rather than guessed."""
    chapters = db.execute(
        select(Chapter).where(Chapter.name == chapter_name).order_by(Chapter.id)
    ).scalars().all()
    if not chapters:
        raise NotFoundError(f"Chapter not found: {chapter_name}")
    if len(chapters) > 1:
        ids = ", ".join(str(chapter.id) for chapter in chapters)
        raise ConflictError(f"Several chapters are named {chapter_name} (ids {ids})")
    return chapters[0]


def clear_chapter(db: DBSession, chapter_name: str) -> dict[str, int]:
    """
    Remove every question and passage of a chapter, keeping the chapter itself.

    Questions attached to the chapter's passages go too, whatever chapter they
    are filed under. Sessions that contain any of the removed questions are
    deleted as a whole, so no session is left with a gap in its question list.
    """
    chapter = find_chapter_by_name(db, chapter_name)

    passage_ids = select(ReadingPassage.id).where(ReadingPassage.chapter_id == chapter.id)
    question_ids = list(
        db.execute(
            select(Question.id).where(
                (Question.chapter_id == chapter.id)
                | Question.passage_id.in_(passage_ids)
            )
        ).scalars().all()
    )

    counts = {"sessions": 0, "answers": 0, "questions": 0, "passages": 0}
    try:
        if question_ids:
            session_ids = list(
                db.execute(
                    select(SessionQuestion.session_id)
                    .where(SessionQuestion.question_id.in_(question_ids))
                    .distinct()
                ).scalars().all()
            )
            if session_ids:
                db.execute(
                    delete(SessionQuestion).where(
                        SessionQuestion.session_id.in_(session_ids)
                    )
                )
                counts["sessions"] = db.execute(
                    delete(TrainingSession).where(TrainingSession.id.in_(session_ids))
                ).rowcount

            counts["answers"] = db.execute(
                delete(Answer).where(Answer.question_id.in_(question_ids))
            ).rowcount
            counts["questions"] = db.execute(
                delete(Question).where(Question.id.in_(question_ids))
            ).rowcount

        counts["passages"] = db.execute(
            delete(ReadingPassage).where(ReadingPassage.chapter_id == chapter.id)
        ).rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Cleared chapter {chapter_name}: {counts['questions']} questions, "
        f"{counts['answers']} answers, {counts['passages']} passages, "
        f"{counts['sessions']} sessions"
    )
    return counts
