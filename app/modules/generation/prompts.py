"""
Prompt builders for Gemini generation.

Every prompt pins the response language and, where JSON is expected, spells
out the exact shape the activities schemas accept.
"""

from app.modules.generation.models import DEFAULT_TRANSLATION_LANGUAGE, LANGUAGE_NAMES

RESPOND_IN = {
    "th": "ตอบเป็นภาษาไทยเท่านั้น",
    "en": "Respond in English only.",
}

GENERATE_IN = {
    "th": "สร้างเนื้อหาทั้งหมดเป็นภาษาไทย",
    "en": "Generate all content in English.",
}

EASY_EXPLAIN = """
EASY EXPLAIN MODE (Feynman Technique) - IMPORTANT:
You MUST explain concepts using:
1. Simple, everyday language - like teaching a curious child
2. Analogies and metaphors from daily life (e.g., "think of it like a water pipe...")
3. No technical jargon - if you must use it, explain it immediately with a simple comparison
4. Concrete examples that anyone can relate to
5. Start with "why it matters" before explaining "what it is"
6. Make the explanation memorable and fun
"""

LESSON_FORMAT = """{
  "title": "Lesson Title",
  "type": "lesson",
  "tags": ["tag1", "tag2", "tag3"],
  "modules": [
    {
      "title": "Module 1 Title",
      "content_blocks": [
        { "type": "heading", "content": "Section Heading" },
        { "type": "text", "content": "Explanation paragraph..." },
        { "type": "list", "content": ["Point 1", "Point 2", "Point 3"] }
      ]
    }
  ]
}"""


def _respond_in(language: str) -> str:
    return RESPOND_IN.get(language, RESPOND_IN["en"])


def _easy_explain(enabled: bool) -> str:
    return EASY_EXPLAIN if enabled else ""


def _language_label(language: str) -> str:
    return "Thai (ภาษาไทย)" if language == "th" else "English"


def _question_format(quiz_type: str, choice_count: int):
    """(format instruction, JSON example of one question, answer rule)"""
    if quiz_type == "subjective":
        return (
            "Generate subjective/open-ended questions where users write their own answers. "
            "Each question needs a model answer and an explanation of what makes a good answer.",
            '{"question": "Explain in your own words...", "type": "subjective", '
            '"model_answer": "A comprehensive answer...", "explanation": "A good answer should include..."}',
            "- For subjective questions, provide a comprehensive model_answer",
        )
    options = ", ".join(f'"Option {letter}"' for letter in "ABCDE"[:choice_count])
    return (
        f"Generate multiple choice questions with exactly {choice_count} options each.",
        f'{{"question": "Question text?", "type": "multiple_choice", "options": [{options}], '
        f'"correct_answer": 0, "explanation": "Why this answer is correct."}}',
        f'- The "correct_answer" field is the 0-based index of the correct option\n'
        f"- Each question must have exactly {choice_count} options",
    )


def quest_prompt(
    content: str,
    language: str,
    output_type: str,
    quiz_type: str,
    choice_count: int,
    question_count: int
) -> str:
    if language == "th":
        language_instruction = (
            "Generate ALL content in Thai language (ภาษาไทย). Titles, lessons, questions, "
            "options and explanations must ALL be in Thai."
        )
    else:
        language_instruction = "Generate ALL content in English language."

    if output_type == "lesson":
        return f"""You are an educational content creator. Turn the following content into a lesson.

{language_instruction}

Content to transform:
{content}

Respond ONLY with valid JSON in this exact format:
{LESSON_FORMAT}

Rules:
- CRITICAL: All text content must be in {_language_label(language)}
- Create 3-5 modules, each with 3-5 content blocks
- Generate 3-5 lowercase tags describing the topic
- Generate exactly valid JSON, no markdown formatting"""

    if output_type == "flashcard":
        return f"""You are an educational flashcard generator. Create flashcards from the following content.

{language_instruction}

Content to transform:
{content}

Generate exactly {question_count} flashcards covering the key terms and concepts.

Respond ONLY with valid JSON in this exact format:
{{
  "title": "Flashcard Set Title",
  "type": "flashcard",
  "tags": ["tag1", "tag2", "tag3"],
  "cards": [
    {{"front": "Term or question", "back": "Definition or answer"}}
  ]
}}

Rules:
- CRITICAL: All text content must be in {_language_label(language)}
- Keep each side short enough to read at a glance
- Generate 3-5 lowercase tags describing the topic
- Generate exactly valid JSON, no markdown formatting"""

    format_instruction, question_example, answer_rule = _question_format(quiz_type, choice_count)

    if output_type == "quiz":
        return f"""You are an educational quiz generator. Create quiz questions from the following content.

{language_instruction}

Content to transform:
{content}

Generate exactly {question_count} quiz questions that test understanding of the key concepts.

{format_instruction}

IMPORTANT: Respond ONLY with valid JSON in this exact format:
{{
  "title": "Quiz Title",
  "type": "quiz",
  "tags": ["tag1", "tag2", "tag3"],
  "quizzes": [
    {question_example}
  ]
}}

Rules:
- CRITICAL: All text content must be in {_language_label(language)}
- Generate 3-5 lowercase tags that help users find related quizzes
- Create engaging and clear questions with helpful explanations
- Questions should cover different aspects of the content
{answer_rule}
- Generate exactly valid JSON, no markdown formatting"""

    return f"""You are an educational content transformer. Transform the following content into a gamified learning quest.

{language_instruction}

Content to transform:
{content}

Create a structured learning experience with 3-5 stages. Each stage should have:
1. A catchy title
2. A brief lesson summary (2-3 sentences) that teaches the concept
3. 2-4 quiz questions to test understanding

{format_instruction}

IMPORTANT: Respond ONLY with valid JSON in this exact format:
{{
  "title": "Quest Title",
  "type": "quest",
  "tags": ["tag1", "tag2", "tag3"],
  "stages": [
    {{
      "title": "Stage 1 Title",
      "lesson": "Brief summary of what this stage teaches...",
      "quizzes": [
        {question_example}
      ]
    }}
  ]
}}

Rules:
- CRITICAL: All text content must be in {_language_label(language)}
- Generate 3-5 lowercase tags that help users find related quests
- Each stage should teach a specific concept before testing it
- Ensure questions progressively build on concepts
{answer_rule}
- Generate exactly valid JSON, no markdown formatting"""


def summarize_prompt(content: str, language: str, easy_explain: bool) -> str:
    return f"""{_respond_in(language)}
{_easy_explain(easy_explain)}
Summarize the following content concisely. Keep the key points and main ideas.
Make it easy to understand but comprehensive.
Output in plain text only, no markdown formatting.

Content:
{content}

Summary:"""


def craft_prompt(content: str, language: str, easy_explain: bool) -> str:
    return f"""{_respond_in(language)}
{_easy_explain(easy_explain)}
Restructure the following content for effective learning.
Format it with:
- Clear section headings (use simple text, no markdown #)
- Key concepts highlighted
- Bullet points for lists (use - or •)
- Short paragraphs for easy reading

Output as plain readable text, suitable for text-to-speech.

Content:
{content}

Structured Learning Content:"""


def key_points_prompt(crafted: str, language: str) -> str:
    return f"""{_respond_in(language)}

Extract 3-5 main key points from this content as a JSON array of strings.
Return ONLY the JSON array, no other text.

Content:
{crafted}

JSON array of key points:"""


def translation_language(code: str) -> str:
    return LANGUAGE_NAMES.get(code, DEFAULT_TRANSLATION_LANGUAGE)


def translate_prompt(content: str, target_language: str) -> str:
    return f"""Translate the following content to {translation_language(target_language)}.
Keep the same tone and style. Output only the translated text, no explanations.

Content:
{content}

Translation:"""


def deep_lesson_prompt(topic: str, content: str, language: str) -> str:
    return f"""{GENERATE_IN.get(language, GENERATE_IN["en"])}

Create a comprehensive lesson about this topic. Structure it as multiple modules with clear explanations, examples, and key takeaways.

Topic: {topic or "Based on content below"}

Content to expand upon:
{content}

Return as JSON in this exact format:
{LESSON_FORMAT}

IMPORTANT:
- Create 3-5 modules that progressively build understanding
- Each module should have 3-5 content blocks
- Include real examples and practical applications
- End with key takeaways or summary
- Respond ONLY with valid JSON, no markdown or other text"""
