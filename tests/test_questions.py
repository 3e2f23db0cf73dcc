"""
Tests for question edits, soft delete, likes and feedback.
"""

import json

import pytest
from fastapi.testclient import TestClient

from jdqna.models import Question
from jdqna.routers.questions import next_like_status

from conftest import question_payload


@pytest.fixture
def question(make_record):
    record = make_record(skills=[{"name": "SQL", "questions": [{"content": question_payload("What is an index?")}]}])
    return record.questions[0]


@pytest.mark.parametrize(
    "current,requested,toggle,expected",
    [
        ("NONE", "LIKED", True, "LIKED"),
        ("LIKED", "LIKED", True, "NONE"),
        ("LIKED", "DISLIKED", True, "DISLIKED"),
        ("LIKED", "LIKED", False, "LIKED"),
        ("DISLIKED", "NONE", True, "NONE"),
    ],
)
def test_next_like_status(current, requested, toggle, expected):
    assert next_like_status(current, requested, toggle) == expected


def test_like_twice_with_toggle_yields_none(client: TestClient, auth_headers, question):
    url = f"/api/questions/{question.id}/like"
    first = client.patch(url, json={"status": "LIKED", "toggle": True}, headers=auth_headers)
    assert first.json()["question"]["liked"] == "LIKED"
    second = client.patch(url, json={"status": "LIKED", "toggle": True}, headers=auth_headers)
    assert second.json()["question"]["liked"] == "NONE"


def test_like_without_toggle_sets_status(client: TestClient, auth_headers, question):
    url = f"/api/questions/{question.id}/like"
    client.patch(url, json={"status": "DISLIKED"}, headers=auth_headers)
    response = client.patch(url, json={"status": "DISLIKED"}, headers=auth_headers)
    assert response.json()["question"]["liked"] == "DISLIKED"


def test_like_invalid_status_is_400(client: TestClient, auth_headers, question):
    response = client.patch(f"/api/questions/{question.id}/like", json={"status": "MEH"}, headers=auth_headers)
    assert response.status_code == 400


def test_like_missing_question_is_404(client: TestClient, auth_headers):
    response = client.patch("/api/questions/nope/like", json={"status": "LIKED"}, headers=auth_headers)
    assert response.status_code == 404


def test_update_feedback_and_flocareer_id(client: TestClient, auth_headers, question):
    response = client.patch(
        f"/api/questions/{question.id}",
        json={"feedback": "Needs an example", "floCareerId": 42},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()["question"]
    assert body["feedback"] == "Needs an example"
    assert body["floCareerId"] == 42


def test_update_content_is_merged(client: TestClient, auth_headers, question):
    response = client.patch(
        f"/api/questions/{question.id}",
        json={"content": {"question": "Write code to build an index.", "ignored": "x"}},
        headers=auth_headers,
    )
    body = response.json()["question"]
    content = json.loads(body["content"])
    assert content["question"] == "Write code to build an index."
    assert content["answer"] == "A function that yields values lazily."
    assert "ignored" not in content
    assert body["coding"] is True


def test_update_requires_a_field(client: TestClient, auth_headers, question):
    response = client.patch(f"/api/questions/{question.id}", json={}, headers=auth_headers)
    assert response.status_code == 400


def test_update_rejects_bad_flocareer_id(client: TestClient, auth_headers, question):
    response = client.patch(f"/api/questions/{question.id}", json={"floCareerId": -1}, headers=auth_headers)
    assert response.status_code == 400


def test_soft_delete_records_feedback(client: TestClient, auth_headers, question, db):
    response = client.request(
        "DELETE", f"/api/questions/{question.id}", json={"feedback": "Off topic"}, headers=auth_headers
    )
    assert response.status_code == 200
    db.expire_all()
    q = db.get(Question, question.id)
    assert q.deleted is True
    assert q.deleted_feedback == "Off topic"


def test_soft_delete_without_body(client: TestClient, auth_headers, question, db):
    response = client.delete(f"/api/questions/{question.id}", headers=auth_headers)
    assert response.status_code == 200
    db.expire_all()
    assert db.get(Question, question.id).deleted is True


def test_delete_missing_question_is_404(client: TestClient, auth_headers):
    assert client.delete("/api/questions/nope", headers=auth_headers).status_code == 404


def test_question_feedback_endpoint(client: TestClient, auth_headers, question):
    response = client.patch(
        f"/api/questions/{question.id}/feedback", json={"feedback": "Too long"}, headers=auth_headers
    )
    assert response.json()["question"]["feedback"] == "Too long"


def test_update_rejects_non_string_feedback(client: TestClient, auth_headers, question, db):
    response = client.patch(f"/api/questions/{question.id}", json={"feedback": {"x": 1}}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "feedback must be a string"}
    db.expire_all()
    assert db.get(Question, question.id).feedback is None


def test_update_rejects_wrongly_typed_content(client: TestClient, auth_headers, question):
    response = client.patch(
        f"/api/questions/{question.id}", json={"content": {"question": ["not", "text"]}}, headers=auth_headers
    )
    assert response.status_code == 400
    response = client.patch(f"/api/questions/{question.id}", json={"content": {"coding": "yes"}}, headers=auth_headers)
    assert response.status_code == 400
