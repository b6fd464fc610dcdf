"""
Catalog models: chapters, question types, reading passages, questions, answers.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jlpt_api.database import Base


class Chapter(Base):
    """Thematic grouping of questions (e.g. one mock-test unit)."""

    __tablename__ = "chapters"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order_num: Mapped[int] = mapped_column(default=0, nullable=False)

    # Relationships
    questions: Mapped[list["Question"]] = relationship(
        "Question", back_populates="chapter"
    )
    passages: Mapped[list["ReadingPassage"]] = relationship(
        "ReadingPassage", back_populates="chapter"
    )


class QuestionType(Base):
    """
    One of the nine fixed exam sections (mondai 1-9).
    Ids are assigned explicitly by the seed, not autoincremented.
    """

    __tablename__ = "question_types"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    name_ja: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ReadingPassage(Base):
    """Reading text owning a group of (type 9) questions."""

    __tablename__ = "reading_passages"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    chapter_id: Mapped[int] = mapped_column(
        ForeignKey("chapters.id"), nullable=False, index=True
    )
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    chapter: Mapped["Chapter"] = relationship("Chapter", back_populates="passages")
    questions: Mapped[list["Question"]] = relationship(
        "Question",
        back_populates="passage",
        cascade="all, delete-orphan",
        order_by=lambda: [Question.order_in_passage, Question.id],
    )


class Question(Base):
    """
    A single quiz question.
    passage_id is null for standalone questions.
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    chapter_id: Mapped[int] = mapped_column(
        ForeignKey("chapters.id"), nullable=False, index=True
    )
    type_id: Mapped[int] = mapped_column(
        ForeignKey("question_types.id"), nullable=False, index=True
    )
    passage_id: Mapped[int | None] = mapped_column(
        ForeignKey("reading_passages.id"), nullable=True, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    order_in_passage: Mapped[int] = mapped_column(default=0, nullable=False)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    chapter: Mapped["Chapter"] = relationship("Chapter", back_populates="questions")
    question_type: Mapped["QuestionType"] = relationship("QuestionType")
    passage: Mapped["ReadingPassage | None"] = relationship(
        "ReadingPassage", back_populates="questions"
    )
    answers: Mapped[list["Answer"]] = relationship(
        "Answer",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Answer.id",
    )

    @property
    def correct_answer(self) -> "Answer | None":
        """First answer flagged correct, if any."""
        return next((answer for answer in self.answers if answer.is_correct), None)


class Answer(Base):
    """Answer option of a question."""

    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Relationships
    question: Mapped["Question"] = relationship("Question", back_populates="answers")
