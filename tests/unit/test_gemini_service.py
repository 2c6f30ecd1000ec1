"""Unit tests for the Gemini adapter, with the SDK model mocked out"""

import json
from typing import get_type_hints
from unittest.mock import MagicMock

import pytest

from app.services.gemini_service import (
    GeminiService,
    GeneratedQuestion,
    GeneratedQuiz,
    GenerationConfigError,
    GenerationError,
    HOTS_LEVEL,
    STANDARD_LEVEL,
)
from app.models.enums import QuestionDifficulty
from conftest import make_questions

RESOURCES = [
    {
        "title": "Cell Biology Basics",
        "description": "Organelles and membranes",
        "resource_type": "youtube",
        "resource_url": "https://www.youtube.com/watch?v=abc123def45",
    },
    {
        "title": "Mitosis notes",
        "description": None,
        "resource_type": "document",
        "resource_url": "https://example.com/mitosis.pdf",
    },
]


@pytest.fixture
def service():
    """GeminiService whose model returns whatever text a test sets"""
    svc = GeminiService(model_name="gemini-test")
    svc.model = MagicMock()
    return svc


def respond_with(service, text):
    service.model.generate_content.return_value = MagicMock(text=text)


class TestGenerateQuiz:

    def test_returns_validated_questions(self, service):
        respond_with(service, json.dumps({"questions": make_questions([0, 1, 3])}))

        questions = service.generate_quiz(RESOURCES, 3)

        assert [q["correct_answer"] for q in questions] == [0, 1, 3]
        assert all(len(q["options"]) == 4 for q in questions)
        assert questions[0]["difficulty"] == "medium"

    def test_requests_json_output(self, service):
        respond_with(service, json.dumps({"questions": make_questions([0])}))

        service.generate_quiz(RESOURCES, 1)

        _, kwargs = service.model.generate_content.call_args
        assert kwargs["generation_config"].response_mime_type == "application/json"

    def test_strips_markdown_fences(self, service):
        respond_with(service, "```json\n" + json.dumps({"questions": make_questions([2])}) + "\n```")

        questions = service.generate_quiz(RESOURCES, 1)

        assert questions[0]["correct_answer"] == 2

    def test_unclosed_fence(self, service):
        respond_with(service, "```json\n" + json.dumps({"questions": make_questions([3])}))

        questions = service.generate_quiz(RESOURCES, 1)

        assert questions[0]["correct_answer"] == 3

    def test_schema_constrains_difficulty(self, service):
        respond_with(service, json.dumps({"questions": make_questions([0])}))

        service.generate_quiz(RESOURCES, 1)

        _, kwargs = service.model.generate_content.call_args
        assert kwargs["generation_config"].response_schema is GeneratedQuiz
        assert get_type_hints(GeneratedQuestion)["difficulty"] is QuestionDifficulty

    def test_accepts_bare_list(self, service):
        respond_with(service, json.dumps(make_questions([1, 1])))

        assert len(service.generate_quiz(RESOURCES, 2)) == 2

    def test_hots_defaults_difficulty_to_hard(self, service):
        raw = make_questions([0])
        del raw[0]["difficulty"]
        respond_with(service, json.dumps({"questions": raw}))

        questions = service.generate_quiz(RESOURCES, 1, use_hots=True)

        assert questions[0]["difficulty"] == "hard"

    def test_difficulty_label_is_normalized(self, service):
        raw = make_questions([0, 1])
        raw[0]["difficulty"] = "easy"
        raw[1]["difficulty"] = " Medium "
        respond_with(service, json.dumps({"questions": raw}))

        questions = service.generate_quiz(RESOURCES, 2)

        assert [q["difficulty"] for q in questions] == ["easy", "medium"]

    def test_unknown_difficulty_falls_back_to_mode_default(self, service):
        raw = make_questions([0])
        raw[0]["difficulty"] = "very hard"
        respond_with(service, json.dumps({"questions": raw}))

        assert service.generate_quiz(RESOURCES, 1)[0]["difficulty"] == "medium"
        assert service.generate_quiz(RESOURCES, 1, use_hots=True)[0]["difficulty"] == "hard"

    def test_count_mismatch_logs_warning(self, service, caplog):
        respond_with(service, json.dumps({"questions": make_questions([0, 1])}))

        with caplog.at_level("WARNING"):
            questions = service.generate_quiz(RESOURCES, 5)

        assert len(questions) == 2
        assert "Requested 5 questions, got 2" in caplog.text

    def test_invalid_json(self, service):
        respond_with(service, "not json at all")

        with pytest.raises(GenerationError, match="invalid JSON"):
            service.generate_quiz(RESOURCES, 1)

    def test_empty_response(self, service):
        respond_with(service, "   ")

        with pytest.raises(GenerationError, match="empty response"):
            service.generate_quiz(RESOURCES, 1)

    def test_no_questions(self, service):
        respond_with(service, json.dumps({"questions": []}))

        with pytest.raises(GenerationError, match="no questions"):
            service.generate_quiz(RESOURCES, 1)

    def test_three_options_rejected(self, service):
        raw = make_questions([0])
        raw[0]["options"] = ["A", "B", "C"]
        respond_with(service, json.dumps({"questions": raw}))

        with pytest.raises(GenerationError, match="failed validation"):
            service.generate_quiz(RESOURCES, 1)

    def test_correct_answer_out_of_range(self, service):
        raw = make_questions([0])
        raw[0]["correct_answer"] = 4
        respond_with(service, json.dumps({"questions": raw}))

        with pytest.raises(GenerationError):
            service.generate_quiz(RESOURCES, 1)

    def test_sdk_error_is_wrapped(self, service):
        service.model.generate_content.side_effect = RuntimeError("429 quota exceeded")

        with pytest.raises(GenerationError, match="quota exceeded"):
            service.generate_quiz(RESOURCES, 1)

    def test_missing_api_key(self, service, monkeypatch):
        from app.config import settings

        monkeypatch.setattr(settings, "GEMINI_API_KEY", "")

        with pytest.raises(GenerationConfigError):
            service.generate_quiz(RESOURCES, 1)
        service.model.generate_content.assert_not_called()

    def test_input_validation(self, service):
        with pytest.raises(GenerationError):
            service.generate_quiz([], 3)
        with pytest.raises(GenerationError):
            service.generate_quiz(RESOURCES, 0)
        with pytest.raises(GenerationError):
            service.generate_quiz(RESOURCES, 51)


class TestPrompt:

    def test_lists_every_resource(self, service):
        prompt = service.build_quiz_prompt(RESOURCES, 4, use_hots=False)

        assert "Create 4 multiple choice questions" in prompt
        assert "1. **Cell Biology Basics** (youtube)" in prompt
        assert "2. **Mitosis notes** (document)" in prompt
        assert "No description provided" in prompt
        assert "https://example.com/mitosis.pdf" in prompt

    def test_cognitive_level(self, service):
        assert STANDARD_LEVEL in service.build_quiz_prompt(RESOURCES, 1, use_hots=False)
        assert HOTS_LEVEL in service.build_quiz_prompt(RESOURCES, 1, use_hots=True)
