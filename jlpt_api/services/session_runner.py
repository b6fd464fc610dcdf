"""
Session runner: navigation, answer submission, progress and results.

Every operation works off persisted state only; the question order and the
answer order of a session are read back exactly as the builder stored them.
"""
import logging
import re
import string
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session as DBSession, joinedload

from jlpt_api.errors import (
    AlreadyAnswered,
    IndexOutOfRange,
    InvalidAnswer,
    InvalidInputError,
    QuestionNotFound,
    SessionNotFound,
)
from jlpt_api.models.db.catalog import Answer, Question
from jlpt_api.models.db.session import SessionQuestion, TrainingSession
from jlpt_api.models.sessions import (
    AnswerOption,
    AnswerResult,
    AnswerState,
    PassageContext,
    QuestionPayload,
    QuestionStatus,
    QuestionView,
    ResultDetail,
    SessionResults,
    SessionSummary,
)

logger = logging.getLogger(__name__)

LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def answer_label(position: int) -> str:
    """Letter label for a 0-based position in the frozen answer order."""
    if position < len(string.ascii_uppercase):
        return string.ascii_uppercase[position]
    return str(position + 1)


def parse_index(value: object) -> int | None:
    """Parse a client-supplied index, ``None`` when absent or not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if value != value else int(value)
    if isinstance(value, str):
        # Leading integer only: "1.5" -> 1, "3abc" -> 3
        match = LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def percentage(correct: int, total: int) -> int:
    """Share of correct answers in percent, rounded half up."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def get_session(db: DBSession, session_id: str) -> TrainingSession:
    """Get session by ID or raise SessionNotFound."""
    session = db.get(TrainingSession, session_id)
    if not session:
        raise SessionNotFound()
    return session


def get_session_question(
    db: DBSession, session_id: str, index: int
) -> SessionQuestion:
    """Get the session question at ``index`` with its question loaded."""
    session_question = db.execute(
        select(SessionQuestion)
        .options(
            joinedload(SessionQuestion.question).joinedload(Question.passage),
            joinedload(SessionQuestion.question).joinedload(Question.question_type),
        )
        .where(
            SessionQuestion.session_id == session_id,
            SessionQuestion.display_order == index,
        )
    ).unique().scalar_one_or_none()
    if not session_question:
        raise QuestionNotFound()
    return session_question


def _correct_answer(db: DBSession, question_id: int) -> Answer | None:
    return db.execute(
        select(Answer)
        .where(Answer.question_id == question_id, Answer.is_correct.is_(True))
        .order_by(Answer.id)
        .limit(1)
    ).scalar_one_or_none()


def _answered_count(db: DBSession, session_id: str) -> int:
    return db.execute(
        select(func.count(SessionQuestion.id)).where(
            SessionQuestion.session_id == session_id,
            SessionQuestion.user_answer_id.is_not(None),
        )
    ).scalar() or 0


def _first_unanswered_index(db: DBSession, session_id: str) -> int | None:
    return db.execute(
        select(SessionQuestion.display_order)
        .where(
            SessionQuestion.session_id == session_id,
            SessionQuestion.user_answer_id.is_(None),
        )
        .order_by(SessionQuestion.display_order)
        .limit(1)
    ).scalar_one_or_none()


def _passage_context(
    db: DBSession, session_id: str, session_question: SessionQuestion
) -> PassageContext | None:
    """Position of the question among this passage's questions in the session."""
    question = session_question.question
    if question.passage_id is None or question.passage is None:
        return None

    display_orders = list(
        db.execute(
            select(SessionQuestion.display_order)
            .join(Question, SessionQuestion.question_id == Question.id)
            .where(
                SessionQuestion.session_id == session_id,
                Question.passage_id == question.passage_id,
            )
            .order_by(SessionQuestion.display_order)
        ).scalars().all()
    )
    return PassageContext(
        content=question.passage.content,
        title=question.passage.title,
        currentInPassage=display_orders.index(session_question.display_order) + 1,
        totalInPassage=len(display_orders),
    )


def _answer_options(db: DBSession, session_question: SessionQuestion) -> list[AnswerOption]:
    """Answers in the frozen order, labeled by position."""
    frozen_order = session_question.shuffled_answer_order
    if not frozen_order:
        return []

    answers = {
        answer.id: answer
        for answer in db.execute(
            select(Answer).where(Answer.id.in_(frozen_order))
        ).scalars().all()
    }

    options = []
    for position, answer_id in enumerate(frozen_order):
        answer = answers.get(answer_id)
        if answer is None:
            logger.warning(
                f"Answer {answer_id} of session question {session_question.id} no longer exists"
            )
            continue
        options.append(
            AnswerOption(
                id=answer.id,
                content=answer.content,
                label=answer_label(position),
            )
        )
    return options


def get_question_at(
    db: DBSession, session_id: str, index: object = None
) -> QuestionView:
    """
    Return the question view at ``index``.

    A missing or unparsable index falls back to the session's current index;
    the result is clamped into range and persisted as the new current index.
    """
    session = get_session(db, session_id)

    requested = parse_index(index)
    current_index = session.current_index if requested is None else requested
    current_index = session.clamp_index(current_index)

    if current_index != session.current_index:
        session.current_index = current_index
        db.commit()

    session_question = get_session_question(db, session_id, current_index)
    question = session_question.question
    question_type = question.question_type

    answer_state = None
    if session_question.is_answered:
        correct = _correct_answer(db, question.id)
        answer_state = AnswerState(
            userAnswerId=session_question.user_answer_id,
            isCorrect=bool(session_question.is_correct),
            correctAnswerId=correct.id if correct else None,
            explanation=question.explanation,
        )

    return QuestionView(
        sessionId=session.id,
        currentIndex=current_index,
        totalQuestions=session.total_questions,
        completed=session.completed,
        question=QuestionPayload(
            id=question.id,
            content=question.content,
            typeId=question.type_id,
            type=question_type.name if question_type else None,
            typeJa=question_type.name_ja if question_type else None,
            answers=_answer_options(db, session_question),
        ),
        passage=_passage_context(db, session_id, session_question),
        answer=answer_state,
    )


def claim_answer(
    db: DBSession,
    session_question_id: int,
    answer_id: int,
    is_correct: bool,
) -> bool:
    """
    Record the answer only if the question is still unanswered.

    Single conditional UPDATE, so of two concurrent submissions exactly one
    sees an affected row. Returns False when another submission won.
    """
    result = db.execute(
        update(SessionQuestion)
        .where(
            SessionQuestion.id == session_question_id,
            SessionQuestion.user_answer_id.is_(None),
        )
        .values(
            user_answer_id=answer_id,
            is_correct=is_correct,
            answered_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def mark_progress(db: DBSession, session_id: str, index: int) -> None:
    """
    Move the session to ``index`` and recompute ``completed`` in the store.

    The answered count is evaluated by the UPDATE itself, so the last of
    several concurrent submissions always sees every committed answer.
    """
    answered = (
        select(func.count(SessionQuestion.id))
        .where(
            SessionQuestion.session_id == session_id,
            SessionQuestion.user_answer_id.is_not(None),
        )
        .scalar_subquery()
    )
    db.execute(
        update(TrainingSession)
        .where(TrainingSession.id == session_id)
        .values(
            current_index=index,
            completed=answered >= TrainingSession.total_questions,
        )
        .execution_options(synchronize_session=False)
    )


def submit_answer(
    db: DBSession,
    session_id: str,
    answer_id: int | None,
    question_index: object = None,
) -> AnswerResult:
    """
    Answer the question at ``question_index`` (current index when omitted).

    Raises:
        SessionNotFound, QuestionNotFound: unknown session or position
        InvalidInputError: answer id missing
        IndexOutOfRange: index outside the session
        AlreadyAnswered: the question has a recorded answer
        InvalidAnswer: the answer belongs to another question
    """
    if answer_id is None:
        raise InvalidInputError("Answer ID is required")

    session = get_session(db, session_id)

    requested = parse_index(question_index)
    target_index = session.current_index if requested is None else requested
    if target_index < 0 or target_index >= session.total_questions:
        raise IndexOutOfRange()

    session_question = get_session_question(db, session_id, target_index)
    if session_question.is_answered:
        raise AlreadyAnswered()

    answer = db.execute(
        select(Answer).where(
            Answer.id == answer_id,
            Answer.question_id == session_question.question_id,
        )
    ).scalar_one_or_none()
    if not answer:
        raise InvalidAnswer()

    is_correct = bool(answer.is_correct)
    if not claim_answer(db, session_question.id, answer.id, is_correct):
        db.rollback()
        logger.warning(
            f"Concurrent answer for session {session_id} index {target_index} rejected"
        )
        raise AlreadyAnswered()

    mark_progress(db, session_id, target_index)
    db.commit()

    answered_count = _answered_count(db, session_id)
    completed = bool(session.completed)

    correct = _correct_answer(db, session_question.question_id)
    next_index = _first_unanswered_index(db, session_id)

    logger.info(
        f"Session {session_id}: answered index {target_index} "
        f"({'correct' if is_correct else 'wrong'}), {answered_count}/{session.total_questions}"
    )

    return AnswerResult(
        isCorrect=is_correct,
        correctAnswerId=correct.id if correct else None,
        correctAnswerContent=correct.content if correct else None,
        explanation=session_question.question.explanation,
        hasNext=next_index is not None,
        nextIndex=next_index,
        answeredCount=answered_count,
        totalQuestions=session.total_questions,
        completed=completed,
    )


def get_summary(db: DBSession, session_id: str) -> SessionSummary:
    """Compact per-question progress of a session."""
    session = get_session(db, session_id)

    rows = db.execute(
        select(
            SessionQuestion.display_order,
            SessionQuestion.user_answer_id,
            SessionQuestion.is_correct,
        )
        .where(SessionQuestion.session_id == session_id)
        .order_by(SessionQuestion.display_order)
    ).all()

    statuses = [
        QuestionStatus(
            index=display_order,
            answered=user_answer_id is not None,
            isCorrect=bool(is_correct),
        )
        for display_order, user_answer_id, is_correct in rows
    ]
    first_unanswered = next(
        (status.index for status in statuses if not status.answered), None
    )

    return SessionSummary(
        sessionId=session.id,
        totalQuestions=session.total_questions,
        answeredQuestions=sum(1 for status in statuses if status.answered),
        completed=session.completed,
        currentIndex=session.clamp_index(session.current_index),
        firstUnansweredIndex=first_unanswered,
        questions=statuses,
    )


def get_results(db: DBSession, session_id: str) -> SessionResults:
    """Aggregate score and question-by-question detail. Works mid-session too."""
    session = get_session(db, session_id)

    session_questions = db.execute(
        select(SessionQuestion)
        .options(
            joinedload(SessionQuestion.user_answer),
            joinedload(SessionQuestion.question).joinedload(Question.question_type),
            joinedload(SessionQuestion.question).joinedload(Question.answers),
        )
        .where(SessionQuestion.session_id == session_id)
        .order_by(SessionQuestion.display_order)
    ).unique().scalars().all()

    details = []
    correct_count = 0
    answered_count = 0
    for session_question in session_questions:
        question = session_question.question
        question_type = question.question_type
        correct = question.correct_answer

        if session_question.is_answered:
            answered_count += 1
        if session_question.is_correct:
            correct_count += 1

        details.append(
            ResultDetail(
                questionContent=question.content,
                type=question_type.name if question_type else None,
                typeJa=question_type.name_ja if question_type else None,
                userAnswer=(
                    session_question.user_answer.content
                    if session_question.user_answer
                    else None
                ),
                correctAnswer=correct.content if correct else None,
                isCorrect=bool(session_question.is_correct),
                explanation=question.explanation,
            )
        )

    return SessionResults(
        sessionId=session.id,
        completed=session.completed,
        totalQuestions=session.total_questions,
        answeredQuestions=answered_count,
        correctAnswers=correct_count,
        percentage=percentage(correct_count, session.total_questions),
        startedAt=session.started_at,
        details=details,
    )
