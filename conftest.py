# =============================================================================
# CONFTEST - Shared pytest fixtures
# =============================================================================
# Settings are read at import time, so the environment is prepared before
# anything under app/ is imported. Each test gets a fresh SQLite schema and a
# fake question generator in place of Gemini.
# =============================================================================

import os
import tempfile
from pathlib import Path

import pytest

_TEST_DIR = Path(tempfile.mkdtemp(prefix="study-stacks-tests-"))

os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'test.db'}"
os.environ["GEMINI_API_KEY"] = "test-key-123"
os.environ["REDIS_URL"] = "redis://127.0.0.1:6399/15"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "1000000"
os.environ["UPLOAD_DIR"] = str(_TEST_DIR / "uploads")
os.environ["LOG_LEVEL"] = "WARNING"

OWNER = "user_owner"
OTHER = "user_other"


def make_questions(correct_answers):
    """Question dicts whose correct indices are `correct_answers`"""
    return [
        {
            "question": f"Question {i + 1}?",
            "options": ["A", "B", "C", "D"],
            "correct_answer": correct,
            "explanation": f"Option {correct} is right",
            "difficulty": "medium",
        }
        for i, correct in enumerate(correct_answers)
    ]


class FakeGenerator:
    """Stands in for the Gemini adapter; records calls and the quiz state it saw"""

    def __init__(self, questions=None, error=None):
        self.questions = questions if questions is not None else make_questions([1, 2, 2])
        self.error = error
        self.calls = []
        self.on_call = None

    def generate_quiz(self, resources, number_of_questions, use_hots=False):
        self.calls.append({
            "resources": resources,
            "number_of_questions": number_of_questions,
            "use_hots": use_hots,
        })
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error
        return [dict(q) for q in self.questions]


# =============================================================================
# DATABASE
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_schema():
    """Recreate all tables for every test"""
    from app.database import Base, engine
    import app.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    from app.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# GENERATOR
# =============================================================================


@pytest.fixture
def fake_generator(monkeypatch):
    """Replace the generator used by background quiz generation"""
    from app.services.quiz_service import quiz_service

    generator = FakeGenerator()
    monkeypatch.setattr(quiz_service, "generator", generator)
    return generator


# =============================================================================
# HTTP CLIENT
# =============================================================================


@pytest.fixture
def client():
    """FastAPI test client (no server needed)"""
    from fastapi.testclient import TestClient
    from app.main import app

    return TestClient(app)


@pytest.fixture
def owner_headers():
    return {"X-User-Id": OWNER}


@pytest.fixture
def other_headers():
    return {"X-User-Id": OTHER}


@pytest.fixture
def stack(client, owner_headers):
    response = client.post(
        "/api/v1/stacks",
        json={"title": "Linear Algebra", "description": "Vectors and matrices", "emoji": "📐"},
        headers=owner_headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def public_stack(client, owner_headers):
    response = client.post(
        "/api/v1/stacks",
        json={"title": "Public Physics", "is_public": True},
        headers=owner_headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def resources(client, owner_headers, stack):
    """Two resources (R1, R2) in the owner's stack"""
    created = []
    for payload in (
        {"title": "Eigenvalues lecture", "resource_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"},
        {"title": "Matrix notes", "resource_url": "https://example.com/notes.pdf", "status": "todo"},
    ):
        response = client.post(
            f"/api/v1/stacks/{stack['id']}/resources", json=payload, headers=owner_headers
        )
        assert response.status_code == 201
        created.append(response.json())
    return created
