"""
Session builder: selects, groups, shuffles and materializes quiz sessions.

Questions that share a reading passage always travel together as one group and
keep their passage order (order_in_passage, then id). Groups and standalone
questions are interleaved at random. The resulting order, and the order of
every question's answers, is written once and never recomputed.
"""
import logging
import random
import uuid
from collections.abc import Sequence
from typing import Union

from sqlalchemy import select
from sqlalchemy.orm import Session as DBSession, contains_eager

from jlpt_api.config import (
    MIXED_PRESET_NAME,
    MIXED_PRESET_QUOTAS,
    READING_TYPE_ID,
    SENTENCE_ORDERING_TYPE_ID,
)
from jlpt_api.errors import InvalidInputError, NoQuestionsMatched
from jlpt_api.models.db.catalog import Answer, Question
from jlpt_api.models.db.session import SessionQuestion, TrainingSession

logger = logging.getLogger(__name__)

# An item is either one standalone question or one whole passage group
SessionItem = Union[Question, list[Question]]


def shuffled(items: Sequence, rng: random.Random) -> list:
    """Return a uniformly shuffled copy of ``items``."""
    result = list(items)
    rng.shuffle(result)
    return result


def fetch_filtered_questions(
    db: DBSession,
    type_id: int | None = None,
    chapter_ids: list[int] | None = None,
) -> list[Question]:
    """
    Load questions matching the filters in staging order.
    The staging order only matters for passage groups; everything else is
    shuffled afterwards.
    """
    query = (
        select(Question)
        .outerjoin(Question.passage)
        .options(contains_eager(Question.passage))
    )
    if type_id:
        query = query.where(Question.type_id == type_id)
    if chapter_ids:
        query = query.where(Question.chapter_id.in_(chapter_ids))

    query = query.order_by(
        Question.passage_id, Question.order_in_passage, Question.id
    )
    return list(db.execute(query).scalars().all())


def group_by_passage(
    questions: Sequence[Question],
) -> tuple[list[Question], list[list[Question]]]:
    """
    Split questions into standalone ones and per-passage groups.
    Each group is sorted by order_in_passage, then id.
    """
    standalone: list[Question] = []
    groups: dict[int, list[Question]] = {}

    for question in questions:
        if question.passage_id is None:
            standalone.append(question)
        else:
            groups.setdefault(question.passage_id, []).append(question)

    ordered_groups = [
        sorted(group, key=lambda q: (q.order_in_passage, q.id))
        for group in groups.values()
    ]
    return standalone, ordered_groups


def interleave(
    standalone: Sequence[Question],
    groups: Sequence[list[Question]],
    rng: random.Random,
) -> list[Question]:
    """
    Randomly interleave standalone questions and whole passage groups.

    Standalone questions and groups are shuffled independently, concatenated,
    and the combined item list is shuffled once more. Groups are expanded in
    their own order when flattened.
    """
    items: list[SessionItem] = []
    items.extend(shuffled(standalone, rng))
    items.extend(shuffled(groups, rng))

    flattened: list[Question] = []
    for item in shuffled(items, rng):
        if isinstance(item, list):
            flattened.extend(item)
        else:
            flattened.append(item)
    return flattened


def draw_mixed_template(
    db: DBSession, rng: random.Random
) -> tuple[list[Question], list[list[Question]]]:
    """
    Draw the fixed-quota "mock exam" selection.

    Every type except reading gets a uniform sample of standalone questions
    (all of them when fewer than the quota exist). Reading gets one random
    passage with all of its reading questions, whatever the quota says.
    """
    standalone: list[Question] = []
    groups: list[list[Question]] = []

    for type_id, quota in MIXED_PRESET_QUOTAS.items():
        if type_id == READING_TYPE_ID:
            group = _draw_reading_passage(db, rng)
            if group:
                groups.append(group)
            continue

        candidate_ids = list(
            db.execute(
                select(Question.id)
                .where(Question.type_id == type_id, Question.passage_id.is_(None))
                .order_by(Question.id)
            ).scalars().all()
        )
        picked = rng.sample(candidate_ids, min(quota, len(candidate_ids)))
        if len(picked) < quota:
            logger.info(
                f"Mixed template: type {type_id} has {len(picked)} of {quota} questions"
            )
        if picked:
            standalone.extend(
                db.execute(select(Question).where(Question.id.in_(picked)))
                .scalars()
                .all()
            )

    return standalone, groups


def _draw_reading_passage(db: DBSession, rng: random.Random) -> list[Question]:
    """Pick one passage with reading questions and return them in passage order."""
    passage_ids = list(
        db.execute(
            select(Question.passage_id)
            .where(
                Question.type_id == READING_TYPE_ID,
                Question.passage_id.is_not(None),
            )
            .distinct()
            .order_by(Question.passage_id)
        ).scalars().all()
    )
    if not passage_ids:
        logger.info("Mixed template: no reading passages available")
        return []

    passage_id = rng.choice(passage_ids)
    return list(
        db.execute(
            select(Question)
            .where(
                Question.passage_id == passage_id,
                Question.type_id == READING_TYPE_ID,
            )
            .order_by(Question.order_in_passage, Question.id)
        ).scalars().all()
    )


def answer_orders(
    db: DBSession, questions: Sequence[Question], rng: random.Random
) -> dict[int, list[int]]:
    """
    Build the frozen answer order for each question.
    Sentence-ordering answers keep their stored order; all others are shuffled.
    """
    question_ids = {question.id for question in questions}
    stored: dict[int, list[int]] = {question_id: [] for question_id in question_ids}
    if question_ids:
        rows = db.execute(
            select(Answer.question_id, Answer.id)
            .where(Answer.question_id.in_(question_ids))
            .order_by(Answer.id)
        ).all()
        for question_id, answer_id in rows:
            stored[question_id].append(answer_id)

    orders: dict[int, list[int]] = {}
    for question in questions:
        answer_ids = stored[question.id]
        if question.type_id == SENTENCE_ORDERING_TYPE_ID:
            orders[question.id] = list(answer_ids)
        else:
            orders[question.id] = shuffled(answer_ids, rng)
    return orders


def create_session(
    db: DBSession,
    type_id: int | None = None,
    chapter_ids: list[int] | None = None,
    limit: int | None = None,
    preset: str | None = None,
    rng: random.Random | None = None,
) -> TrainingSession:
    """
    Create a session and all of its question rows in one transaction.

    Args:
        db: Database session
        type_id: Only questions of this type (filtered sessions)
        chapter_ids: Only questions from these chapters, empty means all
        limit: Keep at most this many questions; may split a passage group
        preset: Name of a fixed-shape preset; filters are ignored when set
        rng: Random source, a freshly seeded one is used when omitted

    Raises:
        NoQuestionsMatched: if the selection is empty
        InvalidInputError: for an unknown preset
    """
    rng = rng or random.Random()

    if preset is not None:
        if preset != MIXED_PRESET_NAME:
            raise InvalidInputError(f"Unknown preset: {preset}")
        standalone, groups = draw_mixed_template(db, rng)
        final_questions = interleave(standalone, groups, rng)
        type_id, chapter_ids = None, None
    else:
        staged = fetch_filtered_questions(db, type_id, chapter_ids)
        standalone, groups = group_by_passage(staged)
        final_questions = interleave(standalone, groups, rng)
        if limit and limit > 0 and limit < len(final_questions):
            final_questions = final_questions[:limit]

    if not final_questions:
        logger.warning(
            f"No questions matched (type={type_id}, chapters={chapter_ids}, preset={preset})"
        )
        raise NoQuestionsMatched()

    orders = answer_orders(db, final_questions, rng)

    session = TrainingSession(
        id=str(uuid.uuid4()),
        type_filter=str(type_id) if type_id else None,
        preset=preset,
        total_questions=len(final_questions),
        current_index=0,
        completed=False,
    )
    session.chapter_filter = chapter_ids

    try:
        db.add(session)
        for index, question in enumerate(final_questions):
            session_question = SessionQuestion(
                session_id=session.id,
                question_id=question.id,
                display_order=index,
            )
            session_question.shuffled_answer_order = orders[question.id]
            db.add(session_question)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(session)
    logger.info(
        f"Created session {session.id} with {session.total_questions} questions"
        + (f" (preset {preset})" if preset else "")
    )
    return session
