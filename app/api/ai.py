"""
Direct AI question generation endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone
import logging

from app.api.deps import get_current_user_id
from app.config import settings
from app.models import QuestionDifficulty
from app.schemas.quiz import AIQuizRequest, AIQuizResponse
from app.services.gemini_service import gemini_service, GenerationError, GenerationConfigError

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])
logger = logging.getLogger(__name__)


@router.get("/quiz")
async def quiz_service_info():
    """Describe the AI quiz generation capability"""
    return {
        "service": "AI Quiz Generation",
        "version": settings.APP_VERSION,
        "model": gemini_service.model_name,
        "supported_question_types": ["multiple-choice"],
        "max_questions": settings.MAX_QUIZ_QUESTIONS,
        "supported_difficulties": [d.value for d in QuestionDifficulty],
        "features": [
            "Higher Order Thinking Skills (HOTS) support",
            "Structured output with explanations",
            "Resource-based question generation",
        ],
    }


@router.post("/quiz", response_model=AIQuizResponse)
def generate_questions(
    request: AIQuizRequest,
    user_id: str = Depends(get_current_user_id)
):
    """
    Generate questions synchronously from an inline resource list

    Nothing is persisted; stack quizzes use the background flow instead.
    """
    try:
        questions = gemini_service.generate_quiz(
            resources=[r.model_dump() for r in request.resources],
            number_of_questions=request.number_of_questions,
            use_hots=request.use_hots,
        )
    except GenerationConfigError as e:
        logger.error(f"AI service misconfigured: {str(e)}")
        raise HTTPException(status_code=503, detail="AI service configuration error")
    except GenerationError as e:
        logger.error(f"Direct generation failed for {user_id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to generate quiz questions")

    return AIQuizResponse(
        questions=questions,
        generated_at=datetime.now(timezone.utc),
        resources_used=len(request.resources),
        cognitive_level="HOTS" if request.use_hots else "Standard",
    )
