"""
Tests for records, skills, skill feedback and global feedback.
"""

from fastapi.testclient import TestClient

from jdqna.models import Feedback, Question, Regeneration, Skill

from conftest import question_payload


def test_get_record_orders_skills_by_requirement_then_priority(client: TestClient, auth_headers, make_record):
    record = make_record(skills=[
        {"name": "Optional first", "requirement": "OPTIONAL", "priority": 1},
        {"name": "Mandatory late", "requirement": "MANDATORY", "priority": 5},
        {"name": "Mandatory early", "requirement": "MANDATORY", "priority": 2},
    ])
    response = client.get(f"/api/records/{record.id}", headers=auth_headers)
    assert response.status_code == 200
    names = [s["name"] for s in response.json()["record"]["skills"]]
    assert names == ["Mandatory early", "Mandatory late", "Optional first"]


def test_get_missing_record_is_404(client: TestClient, auth_headers):
    response = client.get("/api/records/missing", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Record not found"}


def test_record_questions_exclude_deleted_by_default(client: TestClient, auth_headers, make_record):
    record = make_record(skills=[
        {"name": "Zeta", "questions": [{"content": question_payload("Z?")}]},
        {"name": "Alpha", "questions": [
            {"content": question_payload("A?")},
            {"content": question_payload("gone"), "deleted": True},
        ]},
    ])
    url = f"/api/records/{record.id}/questions"
    active = client.get(url, headers=auth_headers).json()["questions"]
    assert [q["skill"]["name"] for q in active] == ["Alpha", "Zeta"]

    everything = client.get(url + "?includeDeleted=true", headers=auth_headers).json()["questions"]
    assert len(everything) == 3


class TestAddSkill:
    def test_defaults_and_priority(self, client: TestClient, auth_headers, make_record):
        record = make_record(skills=[{"name": "Python", "priority": 4}])
        response = client.post(f"/api/records/{record.id}/add-skill", json={"name": "Kafka"}, headers=auth_headers)
        assert response.status_code == 200
        skill = response.json()["skill"]
        assert skill["priority"] == 5
        assert skill["level"] == "INTERMEDIATE"
        assert skill["requirement"] == "OPTIONAL"
        assert skill["category"] == "TECHNICAL"
        assert skill["numQuestions"] == 0
        assert skill["difficulty"] == "Medium"
        assert skill["questionFormat"] == "Scenario based"

    def test_duplicate_name_is_400(self, client: TestClient, auth_headers, make_record):
        record = make_record(skills=[{"name": "Python"}])
        response = client.post(f"/api/records/{record.id}/add-skill", json={"name": "python"}, headers=auth_headers)
        assert response.status_code == 400

    def test_name_required(self, client: TestClient, auth_headers, make_record):
        record = make_record()
        response = client.post(f"/api/records/{record.id}/add-skill", json={"name": "  "}, headers=auth_headers)
        assert response.status_code == 400

    def test_invalid_level(self, client: TestClient, auth_headers, make_record):
        record = make_record()
        response = client.post(
            f"/api/records/{record.id}/add-skill", json={"name": "Go", "level": "GURU"}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_non_string_difficulty_is_400(self, client: TestClient, auth_headers, make_record):
        record = make_record()
        for body in ({"name": "Go", "difficulty": 3}, {"name": "Go", "questionFormat": {"a": 1}}):
            response = client.post(f"/api/records/{record.id}/add-skill", json=body, headers=auth_headers)
            assert response.status_code == 400

    def test_missing_record(self, client: TestClient, auth_headers):
        response = client.post("/api/records/missing/add-skill", json={"name": "Go"}, headers=auth_headers)
        assert response.status_code == 404


class TestUpdateSkill:
    def test_updates_fields(self, client: TestClient, auth_headers, make_record):
        record = make_record(skills=[{"name": "Python"}])
        response = client.patch(
            f"/api/skills/{record.skills[0].id}",
            json={"level": "EXPERT", "numQuestions": 3, "questionFormat": "Coding"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        skill = response.json()["skill"]
        assert skill["level"] == "EXPERT"
        assert skill["numQuestions"] == 3
        assert skill["questionFormat"] == "Coding"

    def test_no_fields_is_400(self, client: TestClient, auth_headers, make_record):
        record = make_record(skills=[{"name": "Python"}])
        response = client.patch(f"/api/skills/{record.skills[0].id}", json={"color": "red"}, headers=auth_headers)
        assert response.status_code == 400

    def test_invalid_enum_is_400(self, client: TestClient, auth_headers, make_record):
        record = make_record(skills=[{"name": "Python"}])
        response = client.patch(f"/api/skills/{record.skills[0].id}", json={"requirement": "MAYBE"}, headers=auth_headers)
        assert response.status_code == 400

    def test_missing_skill_is_404(self, client: TestClient, auth_headers):
        response = client.patch("/api/skills/missing", json={"level": "EXPERT"}, headers=auth_headers)
        assert response.status_code == 404


def test_delete_skill_cascades(client: TestClient, auth_headers, make_record, openai_client, db):
    record = make_record(skills=[
        {"name": "Python", "questions": [{"content": question_payload("Q1?")}]},
        {"name": "Go", "questions": [{"content": question_payload("Q2?")}]},
    ])
    python = next(s for s in record.skills if s.name == "Python")
    original = python.questions[0]
    skill_id = python.id
    client.post(f"/api/skills/{python.id}/feedback", json={"content": "deeper"}, headers=auth_headers)
    openai_client.queue(question_payload("Q1 again?"))
    client.post(f"/api/questions/{original.id}/regenerate", json={}, headers=auth_headers)

    response = client.delete(f"/api/skills/{skill_id}", headers=auth_headers)
    assert response.status_code == 200

    db.expire_all()
    assert db.get(Skill, skill_id) is None
    assert db.query(Question).filter(Question.skill_id == skill_id).count() == 0
    assert db.query(Feedback).count() == 0
    assert db.query(Regeneration).count() == 0
    assert db.query(Question).count() == 1


def test_delete_missing_skill_is_404(client: TestClient, auth_headers):
    assert client.delete("/api/skills/missing", headers=auth_headers).status_code == 404


class TestSkillFeedback:
    def test_create_and_list(self, client: TestClient, auth_headers, make_record):
        record = make_record(skills=[{"name": "Python"}])
        url = f"/api/skills/{record.skills[0].id}/feedback"
        created = client.post(url, json={"content": "  Focus on async  "}, headers=auth_headers)
        assert created.status_code == 200
        assert created.json()["feedback"]["content"] == "Focus on async"

        listed = client.get(url, headers=auth_headers).json()["feedbacks"]
        assert [f["content"] for f in listed] == ["Focus on async"]

    def test_blank_content_is_400(self, client: TestClient, auth_headers, make_record):
        record = make_record(skills=[{"name": "Python"}])
        response = client.post(f"/api/skills/{record.skills[0].id}/feedback", json={"content": " "}, headers=auth_headers)
        assert response.status_code == 400

    def test_missing_skill_is_404(self, client: TestClient, auth_headers):
        response = client.post("/api/skills/missing/feedback", json={"content": "x"}, headers=auth_headers)
        assert response.status_code == 404


class TestGlobalFeedback:
    def test_upsert(self, client: TestClient, auth_headers, make_record):
        record = make_record()
        url = f"/api/records/{record.id}/global-feedback"

        assert client.get(url, headers=auth_headers).json()["globalFeedback"] is None

        first = client.post(url, json={"feedback": "Shorter questions"}, headers=auth_headers).json()["globalFeedback"]
        second = client.post(url, json={"feedback": "More coding"}, headers=auth_headers).json()["globalFeedback"]
        assert first["id"] == second["id"]
        assert client.get(url, headers=auth_headers).json()["globalFeedback"]["content"] == "More coding"

    def test_feedback_required(self, client: TestClient, auth_headers, make_record):
        record = make_record()
        response = client.post(f"/api/records/{record.id}/global-feedback", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_missing_record(self, client: TestClient, auth_headers):
        response = client.post("/api/records/missing/global-feedback", json={"feedback": "x"}, headers=auth_headers)
        assert response.status_code == 404


def test_find_record(client: TestClient, auth_headers, make_record):
    record = make_record(req_id=11, user_id=22)
    response = client.post("/api/find-record", json={"reqId": 11, "userId": "22"}, headers=auth_headers)
    assert response.json() == {"success": True, "recordId": record.id}

    missing = client.post("/api/find-record", json={"reqId": 1, "userId": 2}, headers=auth_headers)
    assert missing.status_code == 404


def test_list_records_counts(client: TestClient, auth_headers, make_record):
    make_record(skills=[{"name": "Go", "questions": [{"content": question_payload()}]}])
    records = client.get("/api/records", headers=auth_headers).json()["records"]
    assert records[0]["skillCount"] == 1
    assert records[0]["questionCount"] == 1
