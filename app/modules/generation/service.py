import logging
from typing import Any, Dict, Optional
from supabase import Client
from pydantic import TypeAdapter, ValidationError
from fastapi import HTTPException
from app.modules.activities.schemas import GeneratedQuest, GeneratedLesson
from app.modules.extraction.gemini import GeminiService, GeminiResult, log_gemini_usage, require_ai
from app.modules.extraction.schemas import ExtractionUpdate
from app.modules.extraction.service import ExtractionService
from app.modules.generation import prompts
from app.modules.generation.models import CREDIT_MODES, GENERATION_ACTIONS
from app.modules.generation.parsing import parse_json_response, parse_key_points
from app.modules.generation.schemas import (
    GenerateQuestRequest, SummarizeRequest, CraftRequest, TranslateRequest, DeepLessonRequest,
    SummaryResponse, CraftResponse, TranslationResponse
)
from app.modules.settings.credits import CreditService
from app.modules.settings.service import SettingsService

logger = logging.getLogger(__name__)

_quest_adapter = TypeAdapter(GeneratedQuest)


def validate_generated(data: Any, output_type: str):
    """Generated JSON as a quest of the requested type; 502 when it does not fit"""
    if not isinstance(data, dict):
        raise HTTPException(status_code=502, detail="AI returned an unexpected structure")
    data["type"] = output_type
    try:
        return _quest_adapter.validate_python(data)
    except ValidationError as e:
        logger.error(f"Generated {output_type} failed validation: {e}")
        raise HTTPException(status_code=502, detail=f"AI returned an invalid {output_type}")


class GenerationService:
    def __init__(self, supabase: Client, gemini: Optional[GeminiService] = None):
        self.supabase = supabase
        self.gemini = gemini or GeminiService()
        self.credits = CreditService(supabase)

    def _ensure_balance(self, user_id: str, content: str, operation: str, easy_explain: bool = False) -> None:
        """402 when the estimated cost of a text operation exceeds the balance"""
        preview = self.credits.preview_credit_cost(content, CREDIT_MODES[operation], easy_explain, user_id)
        if not preview.is_admin and preview.user_credits < preview.credits_required:
            raise HTTPException(status_code=402, detail="Insufficient credits")

    def _settle(self, user_id: str, action: str, input_tokens: int, output_tokens: int, model: Optional[str]) -> None:
        log_gemini_usage(
            self.supabase,
            GeminiResult(text="", input_tokens=input_tokens, output_tokens=output_tokens, model=model),
            action,
            user_id,
        )
        self.credits.charge_for_usage(user_id, input_tokens, output_tokens, action)

    def _store(self, extraction_id: Optional[str], user_id: str, **values: Any) -> None:
        if extraction_id:
            ExtractionService(self.supabase, self.gemini)\
                .update_extraction(extraction_id, ExtractionUpdate(**values), user_id)

    # ============================================
    # Quests
    # ============================================

    def generate_quest(self, request: GenerateQuestRequest, user_id: str):
        """Quiz, quest, lesson or flashcard set for the content; charges a flat per-generation cost"""
        gemini = require_ai(self.gemini, self.supabase)
        cost = int(SettingsService(self.supabase).get_setting_value("ai_credits_per_generation") or 0)
        if cost > 0:
            self.credits.require_credits(user_id, cost)

        action = GENERATION_ACTIONS[request.output_type]
        result = gemini.generate_text(prompts.quest_prompt(
            request.content,
            request.language,
            request.output_type,
            request.quiz_type,
            request.choice_count,
            request.question_count,
        ))
        log_gemini_usage(self.supabase, result, action, user_id)

        quest = validate_generated(parse_json_response(result.text), request.output_type)
        if cost > 0:
            self.credits.deduct_credits(user_id, cost, action)
        logger.info(f"Generated {request.output_type} for {user_id} ({result.total_tokens} tokens)")
        return quest

    def generate_deep_lesson(self, request: DeepLessonRequest, user_id: str) -> GeneratedLesson:
        gemini = require_ai(self.gemini, self.supabase)
        self._ensure_balance(user_id, request.content, "deep_lesson")

        result = gemini.generate_text(prompts.deep_lesson_prompt(request.topic, request.content, request.language))
        self._settle(user_id, "deep_lesson", result.input_tokens, result.output_tokens, result.model)
        return validate_generated(parse_json_response(result.text, repair=True), "lesson")

    # ============================================
    # Text
    # ============================================

    def summarize_content(self, request: SummarizeRequest, user_id: str) -> SummaryResponse:
        gemini = require_ai(self.gemini, self.supabase)
        self._ensure_balance(user_id, request.content, "summarize", request.easy_explain_enabled)

        result = gemini.generate_text(
            prompts.summarize_prompt(request.content, request.language, request.easy_explain_enabled)
        )
        self._settle(user_id, "summarize", result.input_tokens, result.output_tokens, result.model)

        summary = result.text.strip()
        self._store(request.extraction_id, user_id, summary=summary)
        return SummaryResponse(summary=summary)

    def craft_content(self, request: CraftRequest, user_id: str) -> CraftResponse:
        """Learning-friendly restructure plus 3-5 key points from a second call"""
        gemini = require_ai(self.gemini, self.supabase)
        self._ensure_balance(user_id, request.content, "craft", request.easy_explain_enabled)

        crafted = gemini.generate_text(
            prompts.craft_prompt(request.content, request.language, request.easy_explain_enabled)
        )
        input_tokens, output_tokens = crafted.input_tokens, crafted.output_tokens
        try:
            points = gemini.generate_text(prompts.key_points_prompt(crafted.text, request.language))
            input_tokens += points.input_tokens
            output_tokens += points.output_tokens
            key_points = parse_key_points(points.text, crafted.text)
        except HTTPException as e:
            logger.warning(f"Key point extraction failed, using leading lines: {e.detail}")
            key_points = parse_key_points("", crafted.text)
        self._settle(user_id, "craft", input_tokens, output_tokens, crafted.model)

        text = crafted.text.strip()
        self._store(request.extraction_id, user_id, crafted_content=text)
        return CraftResponse(crafted=text, key_points=key_points)

    def translate_content(self, request: TranslateRequest, user_id: str) -> TranslationResponse:
        gemini = require_ai(self.gemini, self.supabase)
        self._ensure_balance(user_id, request.content, "translate")

        result = gemini.generate_text(prompts.translate_prompt(request.content, request.target_language))
        self._settle(user_id, "translate", result.input_tokens, result.output_tokens, result.model)

        translated = result.text.strip()
        self._store(
            request.extraction_id,
            user_id,
            translated_content=translated,
            translated_language=request.target_language,
        )
        return TranslationResponse(translated=translated)
