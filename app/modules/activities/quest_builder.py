"""
Mapping between a generated quest (what the creator edits) and the
stage/question rows it is persisted as.

Storage layout per activity type:

- quiz: one stage (titled like the activity, empty summary) holding every question
- quest: one stage per quest stage; the stage lesson goes to lesson_summary
- lesson: one stage per module; content_blocks are stored as JSON in lesson_summary
- flashcard: one stage holding one question per card (front -> question, back -> explanation)
"""

import json
import logging
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

StageRows = List[Tuple[Dict[str, Any], List[Dict[str, Any]]]]


def question_row(quiz, order_index: int) -> Dict[str, Any]:
    """Question row without stage_id; non multiple choice questions keep no options."""
    is_multiple_choice = quiz.type == "multiple_choice"
    return {
        "question": quiz.question,
        "options": list(quiz.options) if is_multiple_choice else [],
        "correct_answer": quiz.correct_answer if is_multiple_choice else 0,
        "explanation": quiz.explanation,
        "order_index": order_index,
    }


def build_stage_rows(quest) -> StageRows:
    """(stage row, question rows) pairs for a generated quest; activity_id/stage_id are filled in by the caller."""
    if quest.type == "quiz":
        stage = {"title": quest.title, "lesson_summary": "", "order_index": 0}
        return [(stage, [question_row(q, i) for i, q in enumerate(quest.quizzes)])]

    if quest.type == "quest":
        return [
            (
                {"title": stage.title, "lesson_summary": stage.lesson, "order_index": index},
                [question_row(q, i) for i, q in enumerate(stage.quizzes)],
            )
            for index, stage in enumerate(quest.stages)
        ]

    if quest.type == "lesson":
        return [
            (
                {
                    "title": module.title,
                    "lesson_summary": json.dumps(module.content_blocks, ensure_ascii=False),
                    "order_index": index,
                },
                [],
            )
            for index, module in enumerate(quest.modules)
        ]

    if quest.type == "flashcard":
        stage = {"title": quest.title, "lesson_summary": "", "order_index": 0}
        questions = [
            {
                "question": card.front,
                "options": [],
                "correct_answer": 0,
                "explanation": card.back,
                "order_index": i,
            }
            for i, card in enumerate(quest.cards)
        ]
        return [(stage, questions)]

    raise ValueError(f"Unsupported activity type: {quest.type}")


def _parse_content_blocks(lesson_summary: str) -> List[Dict[str, Any]]:
    if not lesson_summary:
        return []
    try:
        blocks = json.loads(lesson_summary)
    except ValueError:
        logger.warning("Lesson stage has non-JSON content blocks; treating as empty")
        return []
    return blocks if isinstance(blocks, list) else []


def _multiple_choice(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "multiple_choice",
        "question": row["question"],
        "options": row.get("options") or [],
        "correct_answer": row.get("correct_answer", 0),
        "explanation": row.get("explanation", ""),
    }


def reconstruct_quest(activity: Dict[str, Any], stages: List[Dict[str, Any]],
                      questions: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Rebuild the generated quest dict from an activity row and its ordered stages/questions."""
    base = {
        "title": activity["title"],
        "description": activity.get("description"),
        "thumbnail": activity.get("thumbnail"),
        "tags": activity.get("tags"),
    }
    activity_type = activity.get("type")

    if activity_type == "lesson":
        return {
            **base,
            "type": "lesson",
            "modules": [
                {"title": s["title"], "content_blocks": _parse_content_blocks(s.get("lesson_summary"))}
                for s in stages
            ],
        }

    if activity_type == "flashcard":
        return {
            **base,
            "type": "flashcard",
            "cards": [{"front": q["question"], "back": q.get("explanation", "")} for q in questions],
        }

    single_plain_stage = len(stages) == 1 and not stages[0].get("lesson_summary")
    if activity_type == "quiz" or single_plain_stage:
        return {**base, "type": "quiz", "quizzes": [_multiple_choice(q) for q in questions]}

    return {
        **base,
        "type": "quest",
        "stages": [
            {
                "title": s["title"],
                "lesson": s.get("lesson_summary") or "",
                "quizzes": [_multiple_choice(q) for q in questions if q.get("stage_id") == s["id"]],
            }
            for s in stages
        ],
    }
