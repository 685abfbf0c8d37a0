from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from app.modules.generation.models import DEFAULT_CHOICE_COUNT, DEFAULT_QUESTION_COUNT

Language = Literal["th", "en"]
OutputType = Literal["quiz", "quest", "lesson", "flashcard"]
QuizType = Literal["multiple_choice", "subjective"]


class GenerateQuestRequest(BaseModel):
    content: str = Field(min_length=1)
    language: Language = "th"
    output_type: OutputType = "quest"
    quiz_type: QuizType = "multiple_choice"
    choice_count: int = Field(default=DEFAULT_CHOICE_COUNT, ge=2, le=5)
    question_count: int = Field(default=DEFAULT_QUESTION_COUNT, ge=1, le=50)


class SummarizeRequest(BaseModel):
    content: str = Field(min_length=1)
    language: Language = "th"
    easy_explain_enabled: bool = False
    extraction_id: Optional[str] = None


class CraftRequest(SummarizeRequest):
    pass


class TranslateRequest(BaseModel):
    content: str = Field(min_length=1)
    target_language: str = "en"
    extraction_id: Optional[str] = None


class DeepLessonRequest(BaseModel):
    topic: str = ""
    content: str = Field(min_length=1)
    language: Language = "th"


class SummaryResponse(BaseModel):
    summary: str


class CraftResponse(BaseModel):
    crafted: str
    key_points: List[str]


class TranslationResponse(BaseModel):
    translated: str
