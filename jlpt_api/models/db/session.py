"""
TrainingSession and SessionQuestion models.
A session is a materialized, ordered list of questions with frozen answer order.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jlpt_api.database import Base

if TYPE_CHECKING:
    from jlpt_api.models.db.catalog import Answer, Question


class TrainingSession(Base):
    """
    One quiz attempt.
    total_questions is fixed at creation and equals the number of rows in
    ``questions``.
    """

    __tablename__ = "training_sessions"

    # Opaque UUID string
    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)

    started_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Selection metadata
    type_filter: Mapped[str | None] = mapped_column(String(16), nullable=True)
    chapter_filter_json: Mapped[str | None] = mapped_column(
        "chapter_filter", Text, nullable=True
    )
    preset: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Progress
    total_questions: Mapped[int] = mapped_column(nullable=False)
    current_index: Mapped[int] = mapped_column(default=0, nullable=False)
    completed: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Relationships
    questions: Mapped[list["SessionQuestion"]] = relationship(
        "SessionQuestion",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionQuestion.display_order",
    )

    @property
    def chapter_filter(self) -> list[int] | None:
        """Parse chapter filter from JSON."""
        if not self.chapter_filter_json:
            return None
        try:
            return json.loads(self.chapter_filter_json)
        except (json.JSONDecodeError, TypeError):
            return None

    @chapter_filter.setter
    def chapter_filter(self, value: list[int] | None) -> None:
        """Serialize chapter filter to JSON."""
        self.chapter_filter_json = json.dumps(value) if value is not None else None

    def clamp_index(self, index: int) -> int:
        """Clamp a position into [0, total_questions - 1]."""
        if index < 0:
            return 0
        if index >= self.total_questions:
            return max(self.total_questions - 1, 0)
        return index


class SessionQuestion(Base):
    """
    A question placed at a fixed position within a session.
    user_answer_id is written once; shuffled_answer_order never changes.
    """

    __tablename__ = "session_questions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    session_id: Mapped[str] = mapped_column(
        ForeignKey("training_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id"), nullable=False, index=True
    )
    display_order: Mapped[int] = mapped_column(nullable=False)
    shuffled_answer_order_json: Mapped[str] = mapped_column(
        "shuffled_answer_order", Text, nullable=False
    )

    # Outcome
    user_answer_id: Mapped[int | None] = mapped_column(
        ForeignKey("answers.id"), nullable=True
    )
    is_correct: Mapped[bool | None] = mapped_column(nullable=True)
    answered_at: Mapped[datetime | None] = mapped_column(
        sa.DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("session_id", "display_order", name="uq_session_display_order"),
    )

    # Relationships
    session: Mapped["TrainingSession"] = relationship(
        "TrainingSession", back_populates="questions"
    )
    question: Mapped["Question"] = relationship("Question")
    user_answer: Mapped["Answer | None"] = relationship("Answer")

    @property
    def shuffled_answer_order(self) -> list[int]:
        """Parse frozen answer order from JSON."""
        try:
            return json.loads(self.shuffled_answer_order_json)
        except (json.JSONDecodeError, TypeError):
            return []

    @shuffled_answer_order.setter
    def shuffled_answer_order(self, value: list[int]) -> None:
        """Serialize answer order to JSON."""
        self.shuffled_answer_order_json = json.dumps(value)

    @property
    def is_answered(self) -> bool:
        return self.user_answer_id is not None
