"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from app.config import settings
from app.models.enums import QuizStatus, QuestionDifficulty


class QuizQuestion(BaseModel):
    """Individual multiple-choice question"""
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=4, max_length=4)
    correct_answer: int = Field(..., ge=0, le=3)
    explanation: str = ""
    difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM


class QuizCreate(BaseModel):
    """Request schema for quiz creation"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    resource_ids: List[UUID] = Field(..., min_length=1, description="Source resources")
    number_of_questions: int = Field(
        ..., ge=1, le=settings.MAX_QUIZ_QUESTIONS, description="Requested question count"
    )
    use_hots: bool = Field(False, description="Higher-order thinking questions")


class ResourceRef(BaseModel):
    """Source resource with its title resolved at read time"""
    id: UUID
    title: str


class QuizResponse(BaseModel):
    """Quiz with its generation state"""
    id: UUID
    stack_id: UUID
    title: str
    description: Optional[str] = None
    resource_ids: List[UUID]
    resources: List[ResourceRef] = []
    number_of_questions: int
    use_hots: bool
    status: QuizStatus
    questions: List[QuizQuestion] = []
    generated_at: Optional[datetime] = None
    owner_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AnswerSubmission(BaseModel):
    """One answer, positionally matched to the quiz's questions"""
    selected_answer: int = Field(..., ge=0, le=3)
    time_spent: Optional[int] = Field(None, ge=0, description="Seconds on this question")


class AttemptCreate(BaseModel):
    """Schema for quiz attempt submission"""
    answers: List[AnswerSubmission] = Field(..., min_length=1)
    time_spent: int = Field(0, ge=0, description="Total seconds")


class AttemptAnswer(BaseModel):
    """Graded answer as stored on the attempt"""
    question_index: int
    selected_answer: int
    is_correct: bool
    time_spent: int = 0


class AttemptResponse(BaseModel):
    """Scored attempt"""
    id: UUID
    quiz_id: UUID
    user_id: str
    answers: List[AttemptAnswer]
    score: int
    total_questions: int
    correct_answers: int
    time_spent: int
    completed_at: datetime

    class Config:
        from_attributes = True


class AIResourceInput(BaseModel):
    """Inline resource description for direct generation"""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    resource_url: str
    resource_type: str


class AIQuizRequest(BaseModel):
    """Request schema for synchronous question generation"""
    resources: List[AIResourceInput] = Field(..., min_length=1)
    number_of_questions: int = Field(..., ge=1, le=settings.MAX_QUIZ_QUESTIONS)
    use_hots: bool = False


class AIQuizResponse(BaseModel):
    questions: List[QuizQuestion]
    generated_at: datetime
    resources_used: int
    cognitive_level: str
