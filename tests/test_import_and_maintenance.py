import json

import pytest
from sqlalchemy import func, select

from jlpt_api.errors import ConflictError, InvalidInputError, NotFoundError
from jlpt_api.models.db import (
    Answer,
    Chapter,
    Question,
    QuestionType,
    ReadingPassage,
    SessionQuestion,
    TrainingSession,
)
from jlpt_api.services import (
    catalog_service,
    import_service,
    maintenance_service,
    seed_service,
    session_builder,
)


def _count(db, column) -> int:
    return db.execute(select(func.count(column))).scalar()


@pytest.mark.parametrize(
    ("value", "expected"),
    [(3, 3), ("7", 7), ("mondai8", 8), ("grammar", 1), (None, 1), (True, 1)],
)
def test_parse_type_id(value, expected) -> None:
    assert import_service.parse_type_id(value) == expected


def test_parse_answers_accepts_strings_with_correct_position() -> None:
    answers = import_service.parse_answers(
        {"answers": ["あ", "い", "う"], "correctAnswer": 2}
    )

    assert [(a.content, a.isCorrect) for a in answers] == [
        ("あ", False),
        ("い", True),
        ("う", False),
    ]


def test_parse_answers_accepts_objects() -> None:
    answers = import_service.parse_answers(
        {"answers": [{"content": "x", "isCorrect": True}, {"content": "y"}]}
    )

    assert [(a.content, a.isCorrect) for a in answers] == [("x", True), ("y", False)]
    assert import_service.parse_answers({}) == []


def test_import_items_creates_chapters_and_passages(db, catalog) -> None:
    catalog.chapter("第1回", 1)
    items = [
        {
            "chapter": "第1回",
            "type": "mondai7",
            "content": "文法",
            "answers": ["a", "b"],
            "correctAnswer": 1,
        },
        {
            "chapter": "第2回",
            "passageTitle": "読解",
            "passageContent": "本文",
            "questions": [
                {"type": 9, "order": 2, "content": "二", "answers": [{"content": "x", "isCorrect": True}]},
                {"type": 9, "order": 1, "content": "一", "answers": [{"content": "y", "isCorrect": True}]},
            ],
        },
    ]

    added = import_service.import_items(db, items)

    assert added == 3
    chapters = db.execute(select(Chapter).order_by(Chapter.order_num)).scalars().all()
    assert [(c.name, c.order_num) for c in chapters] == [("第1回", 1), ("第2回", 2)]
    passage = db.execute(select(ReadingPassage)).scalar_one()
    assert passage.title == "読解"
    assert [q.content for q in passage.questions] == ["一", "二"]
    assert all(q.chapter_id == chapters[1].id for q in passage.questions)


def test_import_without_chapter_uses_default(db) -> None:
    import_service.import_items(
        db, [{"content": "q", "answers": [{"content": "a", "isCorrect": True}]}]
    )

    question = db.execute(select(Question)).scalar_one()
    assert question.chapter.name == import_service.DEFAULT_CHAPTER
    assert question.type_id == 1


def test_import_is_all_or_nothing(db) -> None:
    items = [
        {"chapter": "A", "content": "ok", "answers": [{"content": "a", "isCorrect": True}]},
        {"chapter": "A", "content": "no correct answer", "answers": ["a", "b"]},
    ]

    with pytest.raises(InvalidInputError):
        import_service.import_items(db, items)

    assert _count(db, Question.id) == 0
    assert _count(db, Chapter.id) == 0


def test_import_rejects_non_list(db) -> None:
    with pytest.raises(InvalidInputError):
        import_service.import_items(db, {"content": "q"})


def test_import_file(db, tmp_path) -> None:
    path = tmp_path / "questions.json"
    path.write_text(
        json.dumps(
            [{"chapter": "File", "type": "2", "content": "漢字", "answers": ["一", "二"], "correctAnswer": 2}],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )

    assert import_service.import_file(db, path) == 1
    assert db.execute(select(Question.type_id)).scalar_one() == 2

    with pytest.raises(InvalidInputError):
        import_service.import_file(db, tmp_path / "missing.json")


def test_seed_question_types_is_idempotent(db) -> None:
    assert seed_service.seed_question_types(db) == 0
    assert _count(db, QuestionType.id) == 9


def test_seed_sample_data(db) -> None:
    imported = seed_service.seed_sample_data(db)

    assert imported == _count(db, Question.id) > 0
    names = [c["name"] for c in catalog_service.list_chapters(db)]
    assert names == seed_service.SAMPLE_CHAPTERS
    assert _count(db, ReadingPassage.id) >= 1


def test_seed_sample_data_refuses_non_empty_catalog(db, catalog, rng) -> None:
    chapter = catalog.chapter("Mine")
    catalog.question(chapter)
    session_builder.create_session(db, rng=rng)

    with pytest.raises(ConflictError):
        seed_service.seed_sample_data(db)

    imported = seed_service.seed_sample_data(db, force=True)

    assert _count(db, TrainingSession.id) == 0
    assert _count(db, Question.id) == imported
    assert db.execute(select(Chapter).where(Chapter.name == "Mine")).scalar_one_or_none() is None


def test_clear_chapter(db, catalog, rng) -> None:
    keep = catalog.chapter("keep", 1)
    target = catalog.chapter("target", 2)
    catalog.questions(keep, 2)
    catalog.questions(target, 3)
    passage = catalog.passage(target)
    catalog.question(target, type_id=9, passage=passage)
    session_builder.create_session(db, rng=rng)
    untouched = session_builder.create_session(db, chapter_ids=[keep.id], rng=rng)

    counts = maintenance_service.clear_chapter(db, "target")

    assert counts == {"sessions": 1, "answers": 16, "questions": 4, "passages": 1}
    db.expire_all()
    assert db.get(Chapter, target.id) is not None
    assert _count(db, Question.id) == 2
    assert _count(db, Answer.id) == 8
    assert [s.id for s in db.execute(select(TrainingSession)).scalars()] == [untouched.id]
    assert _count(db, SessionQuestion.id) == 2


def test_clear_unknown_chapter(db) -> None:
    with pytest.raises(NotFoundError):
        maintenance_service.clear_chapter(db, "nope")


def test_clear_chapter_refuses_ambiguous_name(db, catalog) -> None:
    first = catalog_service.create_chapter(db, "Dup")
    second = catalog_service.create_chapter(db, "Dup")
    catalog.questions(first, 2)
    catalog.questions(second, 2)

    with pytest.raises(ConflictError) as excinfo:
        maintenance_service.clear_chapter(db, "Dup")

    assert f"ids {first.id}, {second.id}" in excinfo.value.message
    assert _count(db, Question.id) == 4


def test_clear_chapter_takes_questions_filed_elsewhere_on_its_passages(db, catalog) -> None:
    target = catalog.chapter("target", 1)
    other = catalog.chapter("other", 2)
    passage = catalog.passage(target)
    catalog.question(other, type_id=9, passage=passage)
    kept = catalog.question(other)

    counts = maintenance_service.clear_chapter(db, "target")

    assert counts["questions"] == 1
    assert counts["passages"] == 1
    db.expire_all()
    assert [q.id for q in db.execute(select(Question)).scalars()] == [kept.id]
