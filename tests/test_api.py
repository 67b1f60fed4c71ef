import io

import pytest

from models import QuizAttempt
from services.store import Store

USER = {"X-User-Id": "1"}
OTHER = {"X-User-Id": "2"}


def _upload(client, headers=USER, name="lecture.txt", body=b"Cells divide by mitosis. DNA is copied first."):
    resp = client.post("/api/documents", headers=headers, content_type="multipart/form-data",
                       data={"file": (io.BytesIO(body), name)})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]["document"]["id"]


def _quiz(client, doc_id, headers=USER, **overrides):
    payload = {"document_id": doc_id, "question_count": 5, "difficulty": "medium",
               "question_type": "multiple_choice", "language": "en"}
    payload.update(overrides)
    return client.post("/api/quizzes/generate", headers=headers, json=payload)


def _start(client, quiz_id, headers=USER):
    resp = client.post(f"/api/quizzes/{quiz_id}/start", headers=headers)
    assert resp.status_code == 200
    return resp.get_json()["data"]


def test_health_needs_no_user(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_missing_user_header_is_unauthenticated(client):
    resp = client.get("/api/quizzes/1")
    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Unauthenticated"}


def test_document_upload_rejects_other_formats(client):
    resp = client.post("/api/documents", headers=USER, content_type="multipart/form-data",
                       data={"file": (io.BytesIO(b"x"), "slides.pptx")})
    assert resp.status_code == 422
    assert "file" in resp.get_json()["errors"]


def test_quiz_generation_hides_answer_key(client, provider):
    doc_id = _upload(client)
    resp = _quiz(client, doc_id)

    assert resp.status_code == 201
    quiz = resp.get_json()["data"]["quiz"]
    assert quiz["document_name"] == "lecture.txt"
    assert quiz["question_count"] == 5
    assert [q["id"] for q in quiz["questions"]] == [1, 2, 3, 4, 5]
    for q in quiz["questions"]:
        assert set(q) == {"id", "question", "options"}
    assert provider.steps() == ["upload", "quiz", "delete"]
    assert provider.calls[1][2] == "lecture.txt"


def test_quiz_request_validation(client):
    resp = _quiz(client, 1, question_count=4, difficulty="extreme", question_type="essay")

    assert resp.status_code == 422
    errors = resp.get_json()["errors"]
    assert set(errors) == {"question_count", "difficulty", "question_type"}
    assert errors["question_count"] == ["Question count must be at least 5"]

    resp = client.post("/api/quizzes/generate", headers=USER, data="nope", content_type="text/plain")
    assert resp.status_code == 422


def test_quiz_for_pending_document_is_refused(app, client, provider):
    store = Store(app.extensions["db_session"]())
    doc_id = store.create_document(user_id=1, filename="p.pdf", original_filename="p.pdf",
                                   file_path="/tmp/p.pdf", status="pending").id

    resp = _quiz(client, doc_id)

    assert resp.status_code == 422
    assert "must be fully processed" in resp.get_json()["message"]
    assert provider.calls == []


def test_generation_failure_does_not_leak_detail(client, provider):
    doc_id = _upload(client)
    provider.fail_on = "generate"

    resp = _quiz(client, doc_id)

    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Failed to generate quiz"}
    assert provider.steps()[-1] == "delete"


def test_empty_quiz_is_not_stored(app, client, provider):
    doc_id = _upload(client)
    provider.questions = []

    resp = _quiz(client, doc_id)

    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Failed to generate quiz questions"
    with app.app_context():
        store = Store(app.extensions["db_session"]())
        assert store.get_document(doc_id, 1).quizzes == []


def test_attempt_flow_start_submit_review(client):
    quiz_id = _quiz(client, _upload(client)).get_json()["data"]["quiz"]["id"]
    started = _start(client, quiz_id)
    assert started["quiz_id"] == quiz_id

    answers = [{"question_id": i, "answer_index": a} for i, a in zip(range(1, 6), [0, 1, 2, 1, 1])]
    resp = client.post(f"/api/quizzes/{quiz_id}/submit", headers=USER,
                       json={"attempt_id": started["attempt_id"], "answers": answers, "time_spent_seconds": 95})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    attempt = data["quiz_attempt"]
    assert attempt["status"] == "completed"
    assert attempt["percentage"] == 60.0
    assert attempt["passed"] is True
    assert attempt["time_spent_seconds"] == 95
    assert data["answers"][3]["correct_answer"] == 3
    assert data["quiz"]["id"] == quiz_id

    again = client.post(f"/api/quizzes/{quiz_id}/submit", headers=USER,
                        json={"attempt_id": started["attempt_id"], "answers": answers, "time_spent_seconds": 1})
    assert again.status_code == 400
    assert again.get_json()["message"] == "This attempt has already been completed"

    review = client.get(f"/api/quizzes/{quiz_id}/attempts/{started['attempt_id']}", headers=USER)
    assert review.get_json()["data"]["answers"] == data["answers"]
    assert review.get_json()["data"]["quiz_attempt"]["percentage"] == 60.0

    shown = client.get(f"/api/quizzes/{quiz_id}", headers=USER).get_json()["data"]["quiz"]
    assert shown["attempts_count"] == 1
    assert shown["best_score"] == 60.0


def test_submit_validation_reports_each_answer(client):
    quiz_id = _quiz(client, _upload(client)).get_json()["data"]["quiz"]["id"]
    resp = client.post(f"/api/quizzes/{quiz_id}/submit", headers=USER, json={
        "attempt_id": 1,
        "answers": [{"question_id": 1}, {"question_id": 2, "answer_index": -1}],
        "time_spent_seconds": -5,
    })

    assert resp.status_code == 422
    errors = resp.get_json()["errors"]
    assert "answers.0.answer_index" in errors
    assert errors["answers.1.answer_index"] == ["Answer index must be at least 0"]
    assert "time_spent_seconds" in errors


def test_resources_of_other_users_look_missing(client):
    doc_id = _upload(client)
    quiz_id = _quiz(client, doc_id).get_json()["data"]["quiz"]["id"]
    attempt_id = _start(client, quiz_id)["attempt_id"]

    for resp in (
        client.get(f"/api/documents/{doc_id}", headers=OTHER),
        _quiz(client, doc_id, headers=OTHER),
        client.get(f"/api/quizzes/{quiz_id}", headers=OTHER),
        client.post(f"/api/quizzes/{quiz_id}/start", headers=OTHER),
        client.get(f"/api/quizzes/{quiz_id}/attempts/{attempt_id}", headers=OTHER),
        client.get(f"/api/quizzes/{quiz_id}/attempts", headers=OTHER),
        client.delete(f"/api/quizzes/{quiz_id}", headers=OTHER),
    ):
        assert resp.status_code == 404
        assert resp.get_json()["message"].endswith("not found")


def test_attempt_history_newest_first(client):
    quiz_id = _quiz(client, _upload(client)).get_json()["data"]["quiz"]["id"]
    first = _start(client, quiz_id)["attempt_id"]
    second = _start(client, quiz_id)["attempt_id"]

    data = client.get(f"/api/quizzes/{quiz_id}/attempts", headers=USER).get_json()["data"]
    assert [a["id"] for a in data["attempts"]] == [second, first]
    assert data["quiz"]["document_name"] == "lecture.txt"


def test_deleting_quiz_removes_attempts(app, client):
    quiz_id = _quiz(client, _upload(client)).get_json()["data"]["quiz"]["id"]
    _start(client, quiz_id)

    assert client.delete(f"/api/quizzes/{quiz_id}", headers=USER).status_code == 200
    assert client.get(f"/api/quizzes/{quiz_id}", headers=USER).status_code == 404
    with app.app_context():
        session = app.extensions["db_session"]()
        assert session.query(QuizAttempt).filter_by(quiz_id=quiz_id).count() == 0


def test_summary_generate_view_delete(client, provider):
    doc_id = _upload(client)
    resp = client.post("/api/summaries/generate", headers=USER,
                       json={"document_id": doc_id, "summary_type": "bullet_points"})

    assert resp.status_code == 201
    summary = resp.get_json()["data"]["summary"]
    assert summary["language"] == "id"
    assert summary["word_count"] == 6
    assert summary["views_count"] == 0
    assert provider.calls[1] == ("summary", "files/fake-1", "lecture.txt", "bullet_points", "id")

    url = f"/api/summaries/{summary['id']}"
    client.get(url, headers=USER)
    viewed = client.get(url, headers=USER).get_json()["data"]["summary"]
    assert viewed["views_count"] == 2
    assert viewed["last_viewed_at"] is not None

    assert client.get(url, headers=OTHER).status_code == 404
    assert client.delete(url, headers=USER).status_code == 200
    assert client.get(url, headers=USER).status_code == 404


@pytest.mark.parametrize("payload,field", [
    ({"summary_type": "concise"}, "document_id"),
    ({"document_id": 1, "summary_type": "poem"}, "summary_type"),
    ({"document_id": 1, "summary_type": "concise", "language": 7}, "language"),
])
def test_summary_request_validation(client, payload, field):
    resp = client.post("/api/summaries/generate", headers=USER, json=payload)
    assert resp.status_code == 422
    assert field in resp.get_json()["errors"]


@pytest.mark.parametrize("header", ["²", "0", "-3", "abc", "1.5"])
def test_malformed_user_header_is_unauthenticated(client, header):
    resp = client.get("/api/quizzes/1", headers={"X-User-Id": header})
    assert resp.status_code == 401


def test_submit_without_answers_is_rejected(client):
    quiz_id = _quiz(client, _upload(client)).get_json()["data"]["quiz"]["id"]
    attempt_id = _start(client, quiz_id)["attempt_id"]

    resp = client.post(f"/api/quizzes/{quiz_id}/submit", headers=USER,
                       json={"attempt_id": attempt_id, "answers": [], "time_spent_seconds": 10})

    assert resp.status_code == 422
    assert resp.get_json()["errors"] == {"answers": ["Answers are required"]}
    attempts = client.get(f"/api/quizzes/{quiz_id}/attempts", headers=USER).get_json()["data"]["attempts"]
    assert attempts[0]["status"] == "in_progress"


@pytest.mark.parametrize("payload,field,message", [
    ({"question_count": True}, "question_count", "Question count must be an integer"),
    ({"question_count": 51}, "question_count", "Question count must not exceed 50"),
    ({"question_count": None}, "question_count", "Question count is required"),
    ({"document_id": 0}, "document_id", "Document ID must be a positive integer"),
    ({"difficulty": "extreme"}, "difficulty", "Difficulty must be one of: easy, medium, hard"),
])
def test_quiz_request_field_messages(client, payload, field, message):
    resp = _quiz(client, 1, **payload)

    assert resp.status_code == 422
    assert resp.get_json()["errors"] == {field: [message]}


def test_unknown_language_is_stored_as_given(client, provider):
    doc_id = _upload(client)
    resp = client.post("/api/summaries/generate", headers=USER,
                       json={"document_id": doc_id, "summary_type": "concise", "language": "PT-br"})

    assert resp.status_code == 201
    assert resp.get_json()["data"]["summary"]["language"] == "PT-br"
    assert provider.calls[1][-1] == "PT-br"
