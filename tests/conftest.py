import os
import random
from collections.abc import Iterator

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from jlpt_api.app import app
from jlpt_api.database import Base, enable_sqlite_foreign_keys, get_db
from jlpt_api.models import db as _models  # noqa: F401
from jlpt_api.models.db import Answer, Chapter, Question, ReadingPassage
from jlpt_api.services.seed_service import seed_question_types


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    seed_question_types(session)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db, session_factory) -> Iterator[TestClient]:
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


class CatalogFactory:
    """Small helper to build catalog rows in tests."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def chapter(self, name: str = "Chapter", order_num: int = 1) -> Chapter:
        chapter = Chapter(name=name, order_num=order_num)
        self.db.add(chapter)
        self.db.commit()
        return chapter

    def passage(self, chapter: Chapter, title: str = "Passage") -> ReadingPassage:
        passage = ReadingPassage(chapter_id=chapter.id, title=title, content=f"{title} text")
        self.db.add(passage)
        self.db.commit()
        return passage

    def question(
        self,
        chapter: Chapter,
        type_id: int = 1,
        passage: ReadingPassage | None = None,
        order_in_passage: int = 0,
        answers: int = 4,
        correct: int = 0,
        content: str | None = None,
        explanation: str | None = "explanation",
    ) -> Question:
        question = Question(
            chapter_id=chapter.id,
            type_id=type_id,
            passage_id=passage.id if passage else None,
            content=content or f"question type {type_id}",
            order_in_passage=order_in_passage,
            explanation=explanation,
        )
        question.answers = [
            Answer(content=f"answer {index}", is_correct=index == correct)
            for index in range(answers)
        ]
        self.db.add(question)
        self.db.commit()
        return question

    def questions(self, chapter: Chapter, count: int, type_id: int = 1) -> list[Question]:
        return [self.question(chapter, type_id=type_id) for _ in range(count)]


@pytest.fixture()
def catalog(db) -> CatalogFactory:
    return CatalogFactory(db)
