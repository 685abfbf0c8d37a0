"""
Tests for AI generation: prompts, JSON cleanup, credit charging and usage logs.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from app.modules.extraction.gemini import GeminiResult
from app.modules.generation import prompts
from app.modules.generation.parsing import parse_json_response, parse_key_points, strip_code_fences
from app.modules.generation.schemas import (
    CraftRequest, DeepLessonRequest, GenerateQuestRequest, SummarizeRequest, TranslateRequest
)
from app.modules.generation.service import GenerationService

QUIZ_JSON = json.dumps({
    "title": "Cells",
    "type": "smart_quiz",
    "tags": ["biology"],
    "quizzes": [
        {"question": "What divides?", "type": "multiple_choice",
         "options": ["Cell", "Rock", "Sun"], "correct_answer": 0, "explanation": "Cells divide."},
    ],
})


@pytest.fixture
def gemini():
    fake = MagicMock()
    fake.configured = True
    return fake


@pytest.fixture
def service(supabase, gemini):
    return GenerationService(supabase, gemini)


def profile(credits=100, role="user"):
    return [{"id": "user-1", "role": role, "ai_credits": credits}]


def usage_row(supabase):
    return supabase.args_of(supabase.queries("ai_usage_logs")[0], "insert")[0][0]


def balance_updates(supabase):
    return [
        args[0]["ai_credits"]
        for calls in supabase.queries("profiles")
        for args in supabase.args_of(calls, "update")
    ]


class TestParsing:
    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('```\n[1]\n```') == "[1]"
        assert strip_code_fences(' {"a": 1} ') == '{"a": 1}'

    def test_repair_trailing_commas_and_control_characters(self):
        text = '{"modules": [{"title": "One",},],\x0b "title": "Line\nbreak"}'
        assert parse_json_response(text, repair=True) == {"modules": [{"title": "One"}], "title": "Line\nbreak"}

    def test_invalid_json(self):
        with pytest.raises(HTTPException) as exc:
            parse_json_response("Sure! Here is your quiz.")
        assert exc.value.status_code == 502
        assert exc.value.detail == "AI returned invalid JSON"

    def test_key_points_fall_back_to_leading_lines(self):
        crafted = "Intro\n\n- one\n- two\n- three\n- four\n- five"
        assert parse_key_points('```json\n["A", "B"]\n```', crafted) == ["A", "B"]
        assert parse_key_points("not json", crafted) == ["Intro", "- one", "- two", "- three", "- four"]


class TestPrompts:
    def test_multiple_choice_option_count(self):
        prompt = prompts.quest_prompt("Cells", "en", "quiz", "multiple_choice", 3, 7)

        assert "exactly 7 quiz questions" in prompt
        assert "exactly 3 options" in prompt
        assert '"Option C"' in prompt
        assert '"Option D"' not in prompt

    def test_subjective_quest_in_thai(self):
        prompt = prompts.quest_prompt("Cells", "th", "quest", "subjective", 4, 10)

        assert "ภาษาไทย" in prompt
        assert "model_answer" in prompt
        assert '"stages"' in prompt

    def test_unknown_translation_language_is_english(self):
        assert "to English." in prompts.translate_prompt("hola", "xx")
        assert "to Japanese." in prompts.translate_prompt("hola", "ja")

    def test_easy_explain_block(self):
        assert "Feynman" in prompts.summarize_prompt("text", "en", True)
        assert "Feynman" not in prompts.summarize_prompt("text", "en", False)


class TestGenerateQuest:
    def test_quiz_is_generated_charged_and_logged(self, service, supabase, gemini):
        supabase.queue("profiles", profile(50)).queue("profiles", profile(50))
        gemini.generate_text.return_value = GeminiResult(
            text=f"```json\n{QUIZ_JSON}\n```", input_tokens=300, output_tokens=200, model="gemini-2.0-flash"
        )

        quest = service.generate_quest(
            GenerateQuestRequest(content="Cells divide.", language="en", output_type="quiz", choice_count=3),
            "user-1",
        )

        assert quest.type == "quiz"
        assert quest.quizzes[0].options == ["Cell", "Rock", "Sun"]
        assert balance_updates(supabase) == [40]
        row = usage_row(supabase)
        assert (row["action"], row["total_tokens"], row["user_id"]) == ("generate_quiz", 500, "user-1")

    def test_short_balance_stops_before_ai_call(self, service, supabase, gemini):
        supabase.queue("profiles", profile(5))

        with pytest.raises(HTTPException) as exc:
            service.generate_quest(GenerateQuestRequest(content="Cells divide."), "user-1")
        assert exc.value.status_code == 402
        gemini.generate_text.assert_not_called()

    def test_invalid_json_is_not_charged(self, service, supabase, gemini):
        supabase.queue("profiles", profile(50))
        gemini.generate_text.return_value = GeminiResult(text="I cannot do that.")

        with pytest.raises(HTTPException) as exc:
            service.generate_quest(GenerateQuestRequest(content="Cells divide."), "user-1")
        assert exc.value.status_code == 502
        assert balance_updates(supabase) == []

    def test_ai_disabled(self, service, supabase, gemini):
        supabase.queue("system_settings", [{"key": "enable_ai_generation", "value": False}])

        with pytest.raises(HTTPException) as exc:
            service.generate_quest(GenerateQuestRequest(content="Cells divide."), "user-1")
        assert exc.value.status_code == 503
        gemini.generate_text.assert_not_called()


class TestTextOperations:
    def test_summary_is_charged_logged_and_stored(self, service, supabase, gemini):
        supabase.queue("profiles", profile(100)).queue("profiles", profile(100))
        supabase.queue("extracted_contents", [
            {"id": "e1", "user_id": "user-1", "input_type": "text", "extracted_text": "hello"},
        ])
        gemini.generate_text.return_value = GeminiResult(text="  Cells split in two.  ", input_tokens=1000, output_tokens=200)

        response = service.summarize_content(
            SummarizeRequest(content="Cells divide by mitosis.", extraction_id="e1"), "user-1"
        )

        assert response.summary == "Cells split in two."
        assert balance_updates(supabase) == [99]
        assert usage_row(supabase)["action"] == "summarize"
        stored = supabase.args_of(supabase.queries("extracted_contents")[0], "update")[0][0]
        assert stored["summary"] == "Cells split in two."

    def test_empty_balance_is_refused(self, service, supabase, gemini):
        supabase.queue("profiles", profile(0))

        with pytest.raises(HTTPException) as exc:
            service.summarize_content(SummarizeRequest(content="Cells divide."), "user-1")
        assert exc.value.status_code == 402
        gemini.generate_text.assert_not_called()

    def test_admin_is_never_charged(self, service, supabase, gemini):
        supabase.queue("profiles", profile(0, "admin")).queue("profiles", profile(0, "admin"))
        gemini.generate_text.return_value = GeminiResult(text="Hola", input_tokens=5, output_tokens=5)

        response = service.translate_content(TranslateRequest(content="Hello", target_language="es"), "user-1")

        assert response.translated == "Hola"
        assert balance_updates(supabase) == []
        assert "Spanish" in gemini.generate_text.call_args[0][0]

    def test_translation_is_stored_with_language(self, service, supabase, gemini):
        supabase.queue("profiles", profile()).queue("profiles", profile())
        supabase.queue("extracted_contents", [
            {"id": "e1", "user_id": "user-1", "input_type": "text", "extracted_text": "hello"},
        ])
        gemini.generate_text.return_value = GeminiResult(text="สวัสดี")

        service.translate_content(TranslateRequest(content="hello", target_language="th", extraction_id="e1"), "user-1")

        stored = supabase.args_of(supabase.queries("extracted_contents")[0], "update")[0][0]
        assert stored["translated_content"] == "สวัสดี"
        assert stored["translated_language"] == "th"

    def test_craft_sums_tokens_of_both_calls(self, service, supabase, gemini):
        supabase.queue("profiles", profile()).queue("profiles", profile())
        gemini.generate_text.side_effect = [
            GeminiResult(text="Cells\n- divide\n- grow", input_tokens=100, output_tokens=60),
            GeminiResult(text='["Cells divide", "Cells grow"]', input_tokens=70, output_tokens=10),
        ]

        response = service.craft_content(CraftRequest(content="Cells divide and grow."), "user-1")

        assert response.key_points == ["Cells divide", "Cells grow"]
        row = usage_row(supabase)
        assert (row["action"], row["input_tokens"], row["output_tokens"]) == ("craft", 170, 70)

    def test_craft_survives_failed_key_point_call(self, service, supabase, gemini):
        supabase.queue("profiles", profile()).queue("profiles", profile())
        gemini.generate_text.side_effect = [
            GeminiResult(text="Cells\n- divide"),
            HTTPException(status_code=503, detail="AI service error"),
        ]

        response = service.craft_content(CraftRequest(content="Cells divide."), "user-1")

        assert response.key_points == ["Cells", "- divide"]

    def test_deep_lesson_repairs_json(self, service, supabase, gemini):
        supabase.queue("profiles", profile()).queue("profiles", profile())
        gemini.generate_text.return_value = GeminiResult(text=(
            '```json\n{"title": "Volcanoes", "modules": [{"title": "Magma", '
            '"content_blocks": [{"type": "text", "content": "Hot rock",},],},],}\n```'
        ))

        lesson = service.generate_deep_lesson(DeepLessonRequest(topic="Volcanoes", content="Magma rises."), "user-1")

        assert lesson.type == "lesson"
        assert lesson.modules[0].content_blocks == [{"type": "text", "content": "Hot rock"}]
        assert usage_row(supabase)["action"] == "deep_lesson"


class TestGenerationRoutes:
    def test_requires_auth(self, client):
        response = client.post("/api/v1/generation/summarize", json={"content": "Cells"})
        assert response.status_code in (401, 403)

    def test_choice_count_is_bounded(self, client, as_user):
        response = client.post("/api/v1/generation/quest", json={"content": "Cells", "choice_count": 6})
        assert response.status_code == 422
