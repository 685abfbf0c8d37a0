"""
Thin wrapper over the google-genai client shared by the extraction fallbacks
(image OCR/description and YouTube summaries from metadata) and the
generation module.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from google import genai
from google.genai import types
from supabase import Client

from app.config import settings
from app.modules.settings.schemas import AIUsageLogCreate
from app.modules.settings.service import SettingsService

logger = logging.getLogger(__name__)

IMAGE_PROMPT = (
    "Please extract ALL text from this image. If this is an infographic, diagram, or chart, "
    "also describe its key information and data points in a structured format. "
    "Return the extracted text in a readable format."
)

GENERATION_CONFIG = types.GenerateContentConfig(
    temperature=0.7,
    top_k=40,
    top_p=0.95,
    max_output_tokens=8192,
)


@dataclass
class GeminiResult:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: Optional[str] = None

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class GeminiService:
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if not self.api_key:
            raise HTTPException(status_code=503, detail="AI service is not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _generate(self, contents) -> GeminiResult:
        client = self._get_client()
        try:
            response = client.models.generate_content(
                model=self.model,
                contents=contents,
                config=GENERATION_CONFIG,
            )
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise HTTPException(status_code=503, detail=f"AI service error: {str(e)}")

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise HTTPException(status_code=503, detail="AI service returned no content")
        usage = getattr(response, "usage_metadata", None)
        return GeminiResult(
            text=text,
            input_tokens=getattr(usage, "prompt_token_count", None) or 0,
            output_tokens=getattr(usage, "candidates_token_count", None) or 0,
            model=self.model,
        )

    def generate_text(self, prompt: str) -> GeminiResult:
        return self._generate(prompt)

    def describe_image(self, data: bytes, mime_type: str) -> GeminiResult:
        """OCR plus a structured description for charts and diagrams"""
        return self._generate([
            IMAGE_PROMPT,
            types.Part.from_bytes(data=data, mime_type=mime_type),
        ])


def require_ai(gemini: GeminiService, supabase: Client) -> GeminiService:
    """The Gemini service, or 503 while AI generation is switched off or unconfigured."""
    if not SettingsService(supabase).is_ai_generation_enabled():
        raise HTTPException(status_code=503, detail="AI generation is currently disabled")
    if not gemini.configured:
        raise HTTPException(status_code=503, detail="AI service is not configured")
    return gemini


def log_gemini_usage(
    supabase: Client,
    result: GeminiResult,
    action: str,
    user_id: Optional[str],
    model_suffix: str = ""
) -> None:
    model = f"{result.model or settings.gemini_model}{model_suffix}"
    SettingsService(supabase).log_ai_usage(
        AIUsageLogCreate(
            action=action,
            input_tokens=result.input_tokens,
            output_tokens=result.output_tokens,
            model=model,
        ),
        user_id,
    )
