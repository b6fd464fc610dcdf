"""
Bulk JSON import of chapters, passages and questions.

Input is a list of items. A plain item is one question::

    {"chapter": "第1回", "type": "mondai7", "content": "...", "explanation": "...",
     "answers": [{"content": "...", "isCorrect": true}, ...]}

Answers may also be plain strings, with ``correctAnswer`` holding the 1-based
position of the correct one. An item with ``passageContent`` is a reading
passage whose ``questions`` list uses the same question format plus ``order``.
"""
import json
import logging
import re
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.orm import Session as DBSession

from jlpt_api.errors import InvalidInputError
from jlpt_api.models.catalog import AnswerInput
from jlpt_api.models.db.catalog import Chapter, ReadingPassage
from jlpt_api.services.catalog_service import create_question

logger = logging.getLogger(__name__)

DEFAULT_CHAPTER = "General"
DEFAULT_TYPE_ID = 1


def parse_type_id(value: object) -> int:
    """Accept 3, "3" or "mondai3"; anything else maps to type 1."""
    if isinstance(value, bool):
        return DEFAULT_TYPE_ID
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = re.search(r"(\d+)", value)
        if match:
            return int(match.group(1))
    return DEFAULT_TYPE_ID


def parse_answers(item: dict[str, object]) -> list[AnswerInput]:
    """Normalize object or string answers to AnswerInput."""
    raw_answers = item.get("answers")
    if not isinstance(raw_answers, list):
        return []

    correct_position = item.get("correctAnswer")
    answers = []
    for index, raw in enumerate(raw_answers):
        if isinstance(raw, dict):
            answers.append(
                AnswerInput(
                    content=str(raw.get("content", "")),
                    isCorrect=bool(raw.get("isCorrect")),
                )
            )
        else:
            answers.append(
                AnswerInput(content=str(raw), isCorrect=correct_position == index + 1)
            )
    return answers


class ChapterResolver:
    """Look chapters up by name, creating missing ones at the end of the list."""

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self._cache: dict[str, int] = {}

    def __call__(self, name: str) -> int:
        if name in self._cache:
            return self._cache[name]

        chapter_id = self.db.execute(
            select(Chapter.id).where(Chapter.name == name).order_by(Chapter.id).limit(1)
        ).scalar_one_or_none()
        if chapter_id is None:
            max_order = self.db.execute(select(func.max(Chapter.order_num))).scalar()
            chapter = Chapter(name=name, order_num=(max_order or 0) + 1)
            self.db.add(chapter)
            self.db.flush()
            chapter_id = chapter.id
            logger.info(f"Created chapter: {name}")

        self._cache[name] = chapter_id
        return chapter_id


def _add_question(
    db: DBSession, item: dict[str, object], chapter_id: int, passage_id: int | None
) -> None:
    order = item.get("order")
    create_question(
        db,
        chapter_id=chapter_id,
        type_id=parse_type_id(item.get("type")),
        content=str(item.get("content") or ""),
        answers=parse_answers(item),
        passage_id=passage_id,
        explanation=item.get("explanation") or None,
        order_in_passage=order if isinstance(order, int) else 0,
        commit=False,
    )


def import_items(db: DBSession, items: list[dict[str, object]]) -> int:
    """
    Import items in a single transaction.
    Returns the number of questions added; nothing is kept if any item fails.
    """
    if not isinstance(items, list):
        raise InvalidInputError("Import data must be a list of items")

    resolve_chapter = ChapterResolver(db)
    added = 0
    try:
        for item in items:
            if not isinstance(item, dict):
                raise InvalidInputError("Import item must be an object")
            chapter_id = resolve_chapter(str(item.get("chapter") or DEFAULT_CHAPTER))

            if item.get("passageContent"):
                passage = ReadingPassage(
                    chapter_id=chapter_id,
                    title=item.get("passageTitle") or None,
                    content=str(item["passageContent"]),
                )
                db.add(passage)
                db.flush()
                for question in item.get("questions") or []:
                    _add_question(db, question, chapter_id, passage.id)
                    added += 1
            else:
                _add_question(db, item, chapter_id, None)
                added += 1
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Successfully imported {added} questions")
    return added


def import_file(db: DBSession, path: Path) -> int:
    """Import a JSON file in the format described above."""
    if not path.exists():
        raise InvalidInputError(f"File not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    logger.info(f"Found {len(data)} items to import from {path}")
    return import_items(db, data)
