from sqlalchemy import select

from jlpt_api.models.db import Answer, SessionQuestion


def _seed(catalog, count: int = 4, type_id: int = 1):
    chapter = catalog.chapter("第1回 模擬テスト")
    return chapter, catalog.questions(chapter, count, type_id=type_id)


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_session_flow(client, db, catalog) -> None:
    _seed(catalog, 2)

    created = client.post("/api/sessions", json={"limit": 5})
    assert created.status_code == 200
    session_id = created.json()["sessionId"]
    assert created.json()["totalQuestions"] == 2

    view = client.get(f"/api/sessions/{session_id}", params={"index": 0})
    assert view.status_code == 200
    body = view.json()
    assert body["currentIndex"] == 0
    assert body["totalQuestions"] == 2
    assert body["completed"] is False
    assert body["passage"] is None
    assert body["answer"] is None
    assert [answer["label"] for answer in body["question"]["answers"]] == ["A", "B", "C", "D"]

    for index in range(2):
        view = client.get(f"/api/sessions/{session_id}", params={"index": index}).json()
        question_id = db.execute(
            select(SessionQuestion.question_id).where(
                SessionQuestion.session_id == session_id,
                SessionQuestion.display_order == index,
            )
        ).scalar_one()
        correct = db.execute(
            select(Answer.id).where(Answer.question_id == question_id, Answer.is_correct.is_(True))
        ).scalar_one()
        assert correct in {answer["id"] for answer in view["question"]["answers"]}

        result = client.post(
            f"/api/sessions/{session_id}/answer",
            json={"answerId": correct, "questionIndex": index},
        )
        assert result.status_code == 200

    final = result.json()
    assert final["isCorrect"] is True
    assert final["completed"] is True
    assert final["hasNext"] is False
    assert final["nextIndex"] is None
    assert final["answeredCount"] == 2

    summary = client.get(f"/api/sessions/{session_id}/summary").json()
    assert summary["answeredQuestions"] == 2
    assert summary["firstUnansweredIndex"] is None
    assert [q["index"] for q in summary["questions"]] == [0, 1]

    results = client.get(f"/api/sessions/{session_id}/results").json()
    assert results["correctAnswers"] == 2
    assert results["percentage"] == 100
    assert results["completed"] is True
    assert len(results["details"]) == 2


def test_create_session_without_matches(client, catalog) -> None:
    _seed(catalog, 2, type_id=1)

    response = client.post("/api/sessions", json={"typeId": 5})

    assert response.status_code == 400
    assert response.json() == {
        "error": "No questions found with selected filters",
        "kind": "invalid_input",
    }


def test_create_mixed_preset(client, catalog) -> None:
    _seed(catalog, 3, type_id=2)

    response = client.post("/api/sessions", json={"preset": "mixed_chapter"})

    assert response.status_code == 200
    assert response.json()["totalQuestions"] == 3


def test_unknown_preset_is_invalid_input(client, catalog) -> None:
    _seed(catalog)

    response = client.post("/api/sessions", json={"preset": "unknown"})

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"


def test_unknown_session_is_404(client) -> None:
    for path in ("/api/sessions/nope", "/api/sessions/nope/summary", "/api/sessions/nope/results"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json() == {"error": "Session not found", "kind": "not_found"}

    response = client.post("/api/sessions/nope/answer", json={"answerId": 1, "questionIndex": 0})
    assert response.status_code == 404


def test_invalid_index_query_falls_back(client, catalog) -> None:
    _seed(catalog, 10)
    session_id = client.post("/api/sessions", json={}).json()["sessionId"]

    clamped = client.get(f"/api/sessions/{session_id}", params={"index": 999}).json()
    fallback = client.get(f"/api/sessions/{session_id}", params={"index": "abc"}).json()

    assert clamped["currentIndex"] == 9
    assert fallback["currentIndex"] == 9


def test_answer_errors(client, catalog) -> None:
    _seed(catalog, 2)
    session_id = client.post("/api/sessions", json={}).json()["sessionId"]
    view = client.get(f"/api/sessions/{session_id}", params={"index": 0}).json()
    answer_id = view["question"]["answers"][0]["id"]

    missing = client.post(f"/api/sessions/{session_id}/answer", json={"questionIndex": 0})
    assert missing.status_code == 400
    assert missing.json()["error"] == "Answer ID is required"

    out_of_range = client.post(
        f"/api/sessions/{session_id}/answer", json={"answerId": answer_id, "questionIndex": 5}
    )
    assert out_of_range.status_code == 400
    assert out_of_range.json()["error"] == "Question index is out of range"

    wrong_question = client.post(
        f"/api/sessions/{session_id}/answer", json={"answerId": answer_id, "questionIndex": 1}
    )
    assert wrong_question.status_code == 400
    assert wrong_question.json()["error"] == "Invalid answer for this question"

    first = client.post(
        f"/api/sessions/{session_id}/answer", json={"answerId": answer_id, "questionIndex": 0}
    )
    second = client.post(
        f"/api/sessions/{session_id}/answer", json={"answerId": answer_id, "questionIndex": 0}
    )
    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json() == {"error": "Question already answered", "kind": "conflict"}


def test_malformed_body_is_400(client) -> None:
    response = client.post("/api/sessions", json={"chapterIds": "all"})

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_input"


def test_public_catalog(client, catalog) -> None:
    _seed(catalog, 3, type_id=7)

    chapters = client.get("/api/chapters").json()
    types = client.get("/api/types").json()

    assert chapters == [
        {"id": chapters[0]["id"], "name": "第1回 模擬テスト", "order_num": 1, "question_count": 3}
    ]
    assert [t["id"] for t in types] == list(range(1, 10))
    assert {t["id"]: t["question_count"] for t in types}[7] == 3


def test_admin_chapter_crud(client, catalog) -> None:
    created = client.post("/api/admin/chapters", json={"name": "New"}).json()
    assert created["order_num"] == 1

    assert client.put(f"/api/admin/chapters/{created['id']}", json={"name": "Renamed"}).json() == {
        "success": True
    }
    assert client.get("/api/chapters").json()[0]["name"] == "Renamed"

    question = client.post(
        "/api/admin/questions",
        json={
            "chapterId": created["id"],
            "typeId": 1,
            "content": "q",
            "answers": [{"content": "a", "isCorrect": True}, {"content": "b"}],
        },
    )
    assert question.status_code == 200

    blocked = client.delete(f"/api/admin/chapters/{created['id']}")
    assert blocked.status_code == 400
    assert blocked.json() == {"error": "Cannot delete chapter with questions", "kind": "conflict"}

    client.delete(f"/api/admin/questions/{question.json()['id']}")
    assert client.delete(f"/api/admin/chapters/{created['id']}").status_code == 200
    assert client.get("/api/chapters").json() == []

    assert client.put("/api/admin/chapters/999", json={"name": "x"}).status_code == 404


def test_admin_question_validation(client, catalog) -> None:
    chapter = catalog.chapter()

    no_correct = client.post(
        "/api/admin/questions",
        json={"chapterId": chapter.id, "typeId": 1, "content": "q", "answers": [{"content": "a"}]},
    )
    no_answers = client.post(
        "/api/admin/questions",
        json={"chapterId": chapter.id, "typeId": 1, "content": "q", "answers": []},
    )
    missing_content = client.post(
        "/api/admin/questions",
        json={"chapterId": chapter.id, "typeId": 1, "answers": [{"content": "a", "isCorrect": True}]},
    )
    bad_chapter = client.post(
        "/api/admin/questions",
        json={"chapterId": 999, "typeId": 1, "content": "q", "answers": [{"content": "a", "isCorrect": True}]},
    )

    assert no_correct.status_code == 400
    assert no_correct.json()["error"] == "At least one answer must be correct"
    assert no_answers.status_code == 400
    assert missing_content.status_code == 400
    assert bad_chapter.status_code == 404


def test_admin_passages_and_questions(client, catalog) -> None:
    chapter = catalog.chapter()

    passage = client.post(
        "/api/admin/passages",
        json={"chapterId": chapter.id, "title": "読解", "content": "本文"},
    ).json()
    for order in (2, 1):
        client.post(
            "/api/admin/questions",
            json={
                "chapterId": chapter.id,
                "typeId": 9,
                "passageId": passage["id"],
                "orderInPassage": order,
                "content": f"q{order}",
                "explanation": "because",
                "answers": [{"content": "a", "isCorrect": True}, {"content": "b"}],
            },
        )

    passages = client.get("/api/admin/passages").json()
    assert passages[0]["question_count"] == 2
    assert passages[0]["chapter_name"] == chapter.name

    questions = client.get("/api/admin/questions").json()
    assert len(questions) == 2
    assert questions[0]["passage_title"] == "読解"
    assert questions[0]["type_name"] == "問題9 - 読解"
    assert [a["content"] for a in questions[0]["answers"]] == ["a", "b"]

    updated = client.put(
        f"/api/admin/questions/{questions[0]['id']}",
        json={"content": "edited", "answers": [{"content": "x"}, {"content": "y", "isCorrect": True}]},
    )
    assert updated.status_code == 200
    detail = client.get(f"/api/admin/questions/{questions[0]['id']}").json()
    assert detail["content"] == "edited"
    assert detail["explanation"] is None
    assert [(a["content"], a["is_correct"]) for a in detail["answers"]] == [("x", False), ("y", True)]
    assert [a["id"] for a in detail["answers"]] == [a["id"] for a in questions[0]["answers"]]

    assert client.delete(f"/api/admin/passages/{passage['id']}").status_code == 200
    assert client.get("/api/admin/questions").json() == []
    assert client.get("/api/admin/passages").json() == []
