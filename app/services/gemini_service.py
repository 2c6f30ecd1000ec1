"""
Gemini AI service for multiple-choice quiz generation
"""
import google.generativeai as genai
from pydantic import ValidationError
from app.config import settings
from app.models.enums import QuestionDifficulty
from app.schemas.quiz import QuizQuestion
import json
import logging
from typing import List, Dict, Any, TypedDict

logger = logging.getLogger(__name__)

# Configure Gemini API
genai.configure(api_key=settings.GEMINI_API_KEY)

STANDARD_LEVEL = (
    "Focus on comprehension and application: understanding key concepts, "
    "remembering important facts, and applying knowledge to familiar situations."
)

HOTS_LEVEL = (
    "Focus on Higher Order Thinking Skills (HOTS): analysis, synthesis, evaluation, "
    "and critical thinking. Questions should require students to analyze relationships, "
    "evaluate arguments, synthesize information, and apply concepts to new situations."
)


class GenerationError(Exception):
    """Raised when the model call fails or returns an unusable question set"""
    pass


class GenerationConfigError(GenerationError):
    """Raised when the service is not configured (e.g. missing API key)"""
    pass


class GeneratedQuestion(TypedDict):
    question: str
    options: list[str]
    correct_answer: int
    explanation: str
    difficulty: QuestionDifficulty


class GeneratedQuiz(TypedDict):
    questions: list[GeneratedQuestion]


class GeminiService:
    """Service for all Gemini AI operations"""

    def __init__(self, model_name: str = settings.GEMINI_MODEL):
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)

    def generate(self, prompt: str, schema: Any) -> Any:
        """
        Ask Gemini for a JSON result shaped by `schema`

        Args:
            prompt: Full natural-language prompt
            schema: Response schema understood by the Gemini SDK

        Returns:
            Parsed JSON value

        Raises:
            GenerationConfigError: API key missing
            GenerationError: request failed or response was not JSON
        """
        if not settings.GEMINI_API_KEY:
            raise GenerationConfigError("Gemini API key is not configured")

        try:
            response = self.model.generate_content(
                prompt,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=schema,
                    temperature=settings.GEMINI_TEMPERATURE,
                ),
            )
            text = response.text
        except Exception as e:
            raise GenerationError(f"Gemini request failed: {str(e)}") from e

        if not text or not text.strip():
            raise GenerationError("Gemini returned an empty response")

        cleaned = text.strip()

        # Remove markdown code fences; the closing one may be missing
        if cleaned.startswith("```json"):
            cleaned = cleaned[7:]
        elif cleaned.startswith("```"):
            cleaned = cleaned[3:]
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
        cleaned = cleaned.strip()

        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.error(f"Response text: {cleaned[:500]}")
            raise GenerationError(f"Gemini returned invalid JSON: {str(e)}") from e

    def generate_quiz(
        self,
        resources: List[Dict[str, Any]],
        number_of_questions: int,
        use_hots: bool = False
    ) -> List[Dict[str, Any]]:
        """
        Generate multiple-choice questions from study resources

        Args:
            resources: Dicts with title, description, resource_type, resource_url
            number_of_questions: Target question count (1-50)
            use_hots: Request higher-order thinking questions

        Returns:
            List of validated question dictionaries
        """
        if not resources:
            raise GenerationError("Resources list is required and cannot be empty")
        if not 1 <= number_of_questions <= settings.MAX_QUIZ_QUESTIONS:
            raise GenerationError(
                f"Number of questions must be between 1 and {settings.MAX_QUIZ_QUESTIONS}"
            )

        prompt = self.build_quiz_prompt(resources, number_of_questions, use_hots)

        logger.info(
            f"Generating {number_of_questions} questions from {len(resources)} resources "
            f"(hots={use_hots}, model={self.model_name})"
        )

        payload = self.generate(prompt, GeneratedQuiz)

        return self.parse_questions(payload, number_of_questions, use_hots)

    def build_quiz_prompt(
        self,
        resources: List[Dict[str, Any]],
        number_of_questions: int,
        use_hots: bool
    ) -> str:
        """Create structured prompt for quiz generation"""

        resource_list = "\n\n".join(
            f"{index}. **{r['title']}** ({r['resource_type']})\n"
            f"- Description: {r.get('description') or 'No description provided'}\n"
            f"- URL: {r['resource_url']}"
            for index, r in enumerate(resources, start=1)
        )

        cognitive_level = HOTS_LEVEL if use_hots else STANDARD_LEVEL

        return f"""
You are an expert educator creating high-quality multiple choice quiz questions based on study resources.

Create {number_of_questions} multiple choice questions based on the following study resources:

{resource_list}

Requirements:
- Each question must have exactly 4 options
- Only one correct answer per question, given as its index (0-3) in "correct_answer"
- Include a detailed explanation for the correct answer
- Label each question's difficulty as easy, medium or hard
- {cognitive_level}
- Make questions directly relevant to the resource content
- Ensure questions test understanding, not just memorization
- Use clear, unambiguous language

Return ONLY valid JSON in this exact format (no markdown, no preamble):

{{
  "questions": [
    {{
      "question": "Question text here?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correct_answer": 0,
      "explanation": "Why this option is correct",
      "difficulty": "medium"
    }}
  ]
}}
"""

    @staticmethod
    def _difficulty(label: Any, default: QuestionDifficulty) -> str:
        """Lower-cased label when it names a difficulty, else the mode default"""
        normalized = str(label or "").strip().lower()
        if normalized in {d.value for d in QuestionDifficulty}:
            return normalized
        return default.value

    def parse_questions(
        self,
        payload: Any,
        number_of_questions: int,
        use_hots: bool
    ) -> List[Dict[str, Any]]:
        """Validate Gemini's payload into question dictionaries"""

        items = payload.get("questions") if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise GenerationError("Response is not a list of questions")
        if not items:
            raise GenerationError("Response contained no questions")

        default_difficulty = QuestionDifficulty.HARD if use_hots else QuestionDifficulty.MEDIUM

        questions = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise GenerationError(f"Question {index} is not an object")
            item = {**item, "difficulty": self._difficulty(item.get("difficulty"), default_difficulty)}
            try:
                question = QuizQuestion(**item)
            except ValidationError as e:
                raise GenerationError(f"Question {index} failed validation: {e}") from e
            questions.append(question.model_dump(mode="json"))

        if len(questions) != number_of_questions:
            logger.warning(f"Requested {number_of_questions} questions, got {len(questions)}")

        return questions


# Global instance
gemini_service = GeminiService()
