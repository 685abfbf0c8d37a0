# Generation stores nothing of its own: results are returned to the caller,
# optionally written onto an extracted_contents row, and every Gemini call is
# recorded in ai_usage_logs (see app/modules/settings/models.py).

LANGUAGE_NAMES = {
    "th": "Thai",
    "en": "English",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "pt": "Portuguese",
    "ru": "Russian",
    "vi": "Vietnamese",
    "id": "Indonesian",
}
DEFAULT_TRANSLATION_LANGUAGE = "English"

# ai_usage_logs action per generated output type
GENERATION_ACTIONS = {
    "quiz": "generate_quiz",
    "quest": "generate_quest",
    "lesson": "generate_lesson",
    "flashcard": "generate_quest",
}

# Credit estimate mode per text operation
CREDIT_MODES = {
    "summarize": "summarize",
    "craft": "lesson",
    "translate": "translate",
    "deep_lesson": "lesson",
}

DEFAULT_CHOICE_COUNT = 4
DEFAULT_QUESTION_COUNT = 10
MAX_KEY_POINTS = 5
