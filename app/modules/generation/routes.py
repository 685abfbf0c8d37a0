from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.activities.schemas import GeneratedQuest, GeneratedLesson
from app.modules.generation.schemas import (
    GenerateQuestRequest, SummarizeRequest, CraftRequest, TranslateRequest, DeepLessonRequest,
    SummaryResponse, CraftResponse, TranslationResponse
)
from app.modules.generation.service import GenerationService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/generation", tags=["generation"])


def get_generation_service(supabase: Client = Depends(get_service_supabase)) -> GenerationService:
    return GenerationService(supabase)


@router.post("/quest", response_model=GeneratedQuest)
async def generate_quest(
    request: GenerateQuestRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service)
):
    """Generate a quiz, quest, lesson or flashcard set from content"""
    return service.generate_quest(request, user_data["id"])


@router.post("/summarize", response_model=SummaryResponse)
async def summarize_content(
    request: SummarizeRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service)
):
    return service.summarize_content(request, user_data["id"])


@router.post("/craft", response_model=CraftResponse)
async def craft_content(
    request: CraftRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service)
):
    """Restructure content for learning, with key points"""
    return service.craft_content(request, user_data["id"])


@router.post("/translate", response_model=TranslationResponse)
async def translate_content(
    request: TranslateRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service)
):
    return service.translate_content(request, user_data["id"])


@router.post("/deep-lesson", response_model=GeneratedLesson)
async def generate_deep_lesson(
    request: DeepLessonRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: GenerationService = Depends(get_generation_service)
):
    return service.generate_deep_lesson(request, user_data["id"])
