"""
Shared fixtures for API tests.

Environment variables are set before any jdqna import so Settings and the
SQLAlchemy engine are built against a throwaway SQLite file.
"""

import json
import os
import tempfile
from types import SimpleNamespace

_DB_PATH = os.path.join(tempfile.gettempdir(), f"jdqna-test-{os.getpid()}.sqlite3")

os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["AUTH_TOKEN"] = "test-token-1234"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ["LOG_LEVEL"] = "DEBUG"

import pytest
from fastapi.testclient import TestClient

from jdqna.db.session import Base, SessionLocal, engine
from jdqna.deps import get_flocareer, get_llm, get_storage
from jdqna.main import app
from jdqna.models import Question, Skill, SkillRecord
from jdqna.services.flocareer_service import FloCareerClient
from jdqna.services.llm import QuestionLLM
from jdqna.services.storage_service import StorageService

AUTH_TOKEN = "test-token-1234"


# ------------------------
# Fake OpenAI client
# ------------------------
class FakeCompletions:
    """Returns queued contents in order; the last one repeats."""

    def __init__(self, contents):
        self.contents = list(contents)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if not self.contents:
            raise AssertionError("unexpected LLM call")
        content = self.contents.pop(0) if len(self.contents) > 1 else self.contents[0]
        if isinstance(content, Exception):
            raise content
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, contents=()):
        self.completions = FakeCompletions(contents)
        self.chat = SimpleNamespace(completions=self.completions)

    def queue(self, *contents):
        self.completions.contents = [
            c if isinstance(c, (str, Exception)) or c is None else json.dumps(c) for c in contents
        ]

    @property
    def calls(self):
        return self.completions.calls


# ------------------------
# Fake Supabase storage
# ------------------------
class FakeBucket:
    def __init__(self, store, name):
        self.store = store
        self.name = name

    def upload(self, path, data, options=None):
        self.store[path] = data
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeSupabase:
    def __init__(self):
        self.objects = {}
        self.storage = SimpleNamespace(from_=lambda bucket: FakeBucket(self.objects, bucket))


# ------------------------
# Fake requests session (FloCareer)
# ------------------------
class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.ok = 200 <= status_code < 300
        self.is_redirect = False

    def json(self):
        return self._payload


class FakeHTTPSession:
    def __init__(self):
        self.get_response = FakeResponse()
        self.post_response = FakeResponse(payload={"success": True, "question_pools": []})
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append(("GET", url, kwargs))
        return self.get_response

    def post(self, url, **kwargs):
        self.requests.append(("POST", url, kwargs))
        return self.post_response


# ------------------------
# Fixtures
# ------------------------
@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def openai_client():
    return FakeOpenAI()


@pytest.fixture
def supabase_client():
    return FakeSupabase()


@pytest.fixture
def flocareer_http():
    return FakeHTTPSession()


@pytest.fixture
def client(openai_client, supabase_client, flocareer_http):
    app.dependency_overrides[get_llm] = lambda: QuestionLLM(client=openai_client, model="test-model", extraction_model="test-mini")
    app.dependency_overrides[get_storage] = lambda: StorageService(client=supabase_client, bucket="uploads")
    app.dependency_overrides[get_flocareer] = lambda: FloCareerClient(base_url="https://flo.test/corporate", session=flocareer_http)
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {AUTH_TOKEN}"}


@pytest.fixture
def make_record(db):
    """Create a record with skills and questions, committed so the API sees it."""

    def _make(skills=None, **record_fields):
        record = SkillRecord(job_title=record_fields.pop("job_title", "Backend Engineer"), **record_fields)
        db.add(record)
        db.flush()
        for index, fields in enumerate(skills or []):
            fields = dict(fields)
            questions = fields.pop("questions", [])
            skill = Skill(record_id=record.id, priority=fields.pop("priority", index + 1), **fields)
            db.add(skill)
            db.flush()
            for q in questions:
                q = dict(q)
                content = q.pop("content")
                question = Question(record_id=record.id, skill_id=skill.id, **q)
                question.set_content(content)
                db.add(question)
        db.commit()
        db.refresh(record)
        return record

    return _make


def question_payload(text="What is a Python generator?", **extra):
    data = {
        "question": text,
        "answer": "A function that yields values lazily.",
        "category": "Technical",
        "difficulty": "Medium",
        "questionFormat": "Open-ended",
        "coding": False,
    }
    data.update(extra)
    return data
