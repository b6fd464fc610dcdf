"""Service layer for the question catalog (chapters, passages, questions)."""
import logging

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session as DBSession, joinedload

from jlpt_api.errors import ChapterNotEmpty, ConflictError, InvalidInputError, NotFoundError
from jlpt_api.models.catalog import AnswerInput
from jlpt_api.models.db.catalog import Answer, Chapter, Question, QuestionType, ReadingPassage
from jlpt_api.models.db.session import SessionQuestion

logger = logging.getLogger(__name__)


# Chapters


def list_chapters(db: DBSession) -> list[dict[str, object]]:
    """List chapters ordered by order_num with their question counts."""
    stmt = (
        select(Chapter, func.count(Question.id))
        .outerjoin(Question, Question.chapter_id == Chapter.id)
        .group_by(Chapter.id)
        .order_by(Chapter.order_num, Chapter.id)
    )
    return [
        {
            "id": chapter.id,
            "name": chapter.name,
            "order_num": chapter.order_num,
            "question_count": count,
        }
        for chapter, count in db.execute(stmt).all()
    ]


def get_chapter(db: DBSession, chapter_id: int) -> Chapter:
    chapter = db.get(Chapter, chapter_id)
    if not chapter:
        raise NotFoundError("Chapter not found")
    return chapter


def create_chapter(db: DBSession, name: str) -> Chapter:
    """Create a chapter placed after all existing ones."""
    name = name.strip()
    if not name:
        raise InvalidInputError("Name is required")

    max_order = db.execute(select(func.max(Chapter.order_num))).scalar()
    chapter = Chapter(name=name, order_num=(max_order or 0) + 1)
    db.add(chapter)
    db.commit()
    db.refresh(chapter)
    logger.info(f"Created chapter {chapter.id} ({chapter.name})")
    return chapter


def update_chapter(db: DBSession, chapter_id: int, name: str) -> Chapter:
    chapter = get_chapter(db, chapter_id)
    name = name.strip()
    if not name:
        raise InvalidInputError("Name is required")
    chapter.name = name
    db.commit()
    db.refresh(chapter)
    return chapter


def delete_chapter(db: DBSession, chapter_id: int) -> None:
    """Delete an empty chapter (and its passages if they own no questions)."""
    chapter = get_chapter(db, chapter_id)

    # Questions of other chapters may hang off this chapter's passages
    question_count = db.execute(
        select(func.count(Question.id))
        .outerjoin(ReadingPassage, Question.passage_id == ReadingPassage.id)
        .where(
            (Question.chapter_id == chapter_id)
            | (ReadingPassage.chapter_id == chapter_id)
        )
    ).scalar() or 0
    if question_count > 0:
        raise ChapterNotEmpty()

    for passage in list(chapter.passages):
        db.delete(passage)
    db.delete(chapter)
    db.commit()
    logger.info(f"Deleted chapter {chapter_id}")


# Question types


def list_question_types(db: DBSession) -> list[dict[str, object]]:
    """List question types with their question counts."""
    stmt = (
        select(QuestionType, func.count(Question.id))
        .outerjoin(Question, Question.type_id == QuestionType.id)
        .group_by(QuestionType.id)
        .order_by(QuestionType.id)
    )
    return [
        {
            "id": question_type.id,
            "name": question_type.name,
            "name_ja": question_type.name_ja,
            "description": question_type.description,
            "question_count": count,
        }
        for question_type, count in db.execute(stmt).all()
    ]


# Reading passages


def list_passages(db: DBSession) -> list[dict[str, object]]:
    """List passages with chapter name and question count."""
    question_count = (
        select(func.count(Question.id))
        .where(Question.passage_id == ReadingPassage.id)
        .correlate(ReadingPassage)
        .scalar_subquery()
    )
    stmt = (
        select(ReadingPassage, Chapter.name, question_count)
        .join(Chapter, ReadingPassage.chapter_id == Chapter.id)
        .order_by(ReadingPassage.chapter_id, ReadingPassage.id)
    )
    return [
        {
            "id": passage.id,
            "chapter_id": passage.chapter_id,
            "chapter_name": chapter_name,
            "title": passage.title,
            "content": passage.content,
            "question_count": count or 0,
        }
        for passage, chapter_name, count in db.execute(stmt).all()
    ]


def get_passage(db: DBSession, passage_id: int) -> ReadingPassage:
    passage = db.get(ReadingPassage, passage_id)
    if not passage:
        raise NotFoundError("Passage not found")
    return passage


def create_passage(
    db: DBSession, chapter_id: int, content: str, title: str | None = None
) -> ReadingPassage:
    if not content or not content.strip():
        raise InvalidInputError("Chapter ID and content are required")
    get_chapter(db, chapter_id)

    passage = ReadingPassage(chapter_id=chapter_id, title=title or None, content=content)
    db.add(passage)
    db.commit()
    db.refresh(passage)
    logger.info(f"Created passage {passage.id} in chapter {chapter_id}")
    return passage


def delete_passage(db: DBSession, passage_id: int) -> None:
    """Delete a passage together with its questions and their answers."""
    passage = get_passage(db, passage_id)
    question_ids = [question.id for question in passage.questions]
    _ensure_not_in_sessions(db, question_ids)

    db.delete(passage)
    db.commit()
    logger.info(f"Deleted passage {passage_id} with {len(question_ids)} questions")


# Questions


def _ensure_not_in_sessions(db: DBSession, question_ids: list[int]) -> None:
    """Refuse to drop questions that existing sessions still point at."""
    if not question_ids:
        return
    used = db.execute(
        select(exists().where(SessionQuestion.question_id.in_(question_ids)))
    ).scalar()
    if used:
        raise ConflictError("Question is used in training sessions")


def list_questions(db: DBSession) -> list[Question]:
    """All questions with chapter, type, passage and answers loaded."""
    stmt = (
        select(Question)
        .options(
            joinedload(Question.chapter),
            joinedload(Question.question_type),
            joinedload(Question.passage),
            joinedload(Question.answers),
        )
        .order_by(Question.chapter_id, Question.type_id, Question.id)
    )
    return list(db.execute(stmt).unique().scalars().all())


def get_question(db: DBSession, question_id: int) -> Question:
    stmt = (
        select(Question)
        .options(
            joinedload(Question.chapter),
            joinedload(Question.question_type),
            joinedload(Question.passage),
            joinedload(Question.answers),
        )
        .where(Question.id == question_id)
    )
    question = db.execute(stmt).unique().scalar_one_or_none()
    if not question:
        raise NotFoundError("Question not found")
    return question


def question_to_dict(question: Question) -> dict[str, object]:
    """Serialize a question with labels for admin listings."""
    return {
        "id": question.id,
        "chapter_id": question.chapter_id,
        "type_id": question.type_id,
        "passage_id": question.passage_id,
        "content": question.content,
        "order_in_passage": question.order_in_passage,
        "explanation": question.explanation,
        "chapter_name": question.chapter.name if question.chapter else None,
        "type_name": question.question_type.name_ja if question.question_type else None,
        "passage_title": question.passage.title if question.passage else None,
        "answers": [
            {
                "id": answer.id,
                "question_id": answer.question_id,
                "content": answer.content,
                "is_correct": answer.is_correct,
            }
            for answer in question.answers
        ],
    }


def _validate_answers(answers: list[AnswerInput]) -> None:
    if not answers:
        raise InvalidInputError("Chapter ID, type ID, content, and answers are required")
    if not any(answer.isCorrect for answer in answers):
        raise InvalidInputError("At least one answer must be correct")


def create_question(
    db: DBSession,
    chapter_id: int,
    type_id: int,
    content: str,
    answers: list[AnswerInput],
    passage_id: int | None = None,
    explanation: str | None = None,
    order_in_passage: int | None = None,
    commit: bool = True,
) -> Question:
    """
    Create a question with its answers.
    Answers are stored in the given order, which is the canonical order used
    for sentence-ordering questions.
    """
    if not content or not content.strip():
        raise InvalidInputError("Chapter ID, type ID, content, and answers are required")
    _validate_answers(answers)

    get_chapter(db, chapter_id)
    if not db.get(QuestionType, type_id):
        raise NotFoundError("Question type not found")
    if passage_id is not None:
        passage = get_passage(db, passage_id)
        if passage.chapter_id != chapter_id:
            raise InvalidInputError("Passage belongs to a different chapter")

    question = Question(
        chapter_id=chapter_id,
        type_id=type_id,
        passage_id=passage_id,
        content=content,
        order_in_passage=order_in_passage or 0,
        explanation=explanation or None,
    )
    question.answers = [
        Answer(content=answer.content, is_correct=answer.isCorrect)
        for answer in answers
    ]
    db.add(question)
    if commit:
        db.commit()
        db.refresh(question)
        logger.info(f"Created question {question.id} (type {type_id}, chapter {chapter_id})")
    else:
        db.flush()
    return question


def update_question(
    db: DBSession,
    question_id: int,
    content: str,
    explanation: str | None = None,
    answers: list[AnswerInput] | None = None,
) -> Question:
    """
    Update question text and, when given, its answers.

    Answers are rewritten position by position so that answer ids stored in
    session answer orders keep pointing at live rows. Surplus old answers are
    removed; that fails with a conflict if a session recorded one as a choice.
    """
    question = get_question(db, question_id)
    if not content or not content.strip():
        raise InvalidInputError("Content is required")

    question.content = content
    question.explanation = explanation or None

    if answers:
        _validate_answers(answers)
        existing = list(question.answers)
        for position, payload in enumerate(answers):
            if position < len(existing):
                existing[position].content = payload.content
                existing[position].is_correct = payload.isCorrect
            else:
                question.answers.append(
                    Answer(content=payload.content, is_correct=payload.isCorrect)
                )

        surplus = [answer.id for answer in existing[len(answers):]]
        if surplus:
            chosen = db.execute(
                select(exists().where(SessionQuestion.user_answer_id.in_(surplus)))
            ).scalar()
            if chosen:
                db.rollback()
                raise ConflictError("Answer is recorded in training sessions")
            for answer in existing[len(answers):]:
                question.answers.remove(answer)

    db.commit()
    db.refresh(question)
    logger.info(f"Updated question {question_id}")
    return question


def delete_question(db: DBSession, question_id: int) -> None:
    """Delete a question and its answers."""
    question = get_question(db, question_id)
    _ensure_not_in_sessions(db, [question.id])
    db.delete(question)
    db.commit()
    logger.info(f"Deleted question {question_id}")
