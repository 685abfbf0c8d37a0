"""
Tests for mapping generated quests to stage/question rows and back.
"""

import json

import pytest
from pydantic import TypeAdapter, ValidationError

from app.modules.activities.quest_builder import build_stage_rows, reconstruct_quest
from app.modules.activities.schemas import GeneratedQuest

quest_adapter = TypeAdapter(GeneratedQuest)


def make_quest(data):
    return quest_adapter.validate_python(data)


class TestBuildStageRows:
    def test_quiz_is_a_single_stage(self):
        quest = make_quest({
            "type": "quiz",
            "title": "Fractions",
            "quizzes": [
                {"question": "1/2 + 1/2?", "options": ["1", "2"], "correct_answer": 0},
                {"question": "Explain", "type": "subjective", "options": ["x"], "correct_answer": 0},
            ],
        })
        rows = build_stage_rows(quest)

        assert len(rows) == 1
        stage, questions = rows[0]
        assert stage == {"title": "Fractions", "lesson_summary": "", "order_index": 0}
        assert [q["order_index"] for q in questions] == [0, 1]
        assert questions[0]["options"] == ["1", "2"]
        # subjective questions keep no options
        assert questions[1]["options"] == []

    def test_quest_stage_per_stage_with_lesson(self):
        quest = make_quest({
            "type": "quest",
            "title": "Space",
            "stages": [
                {"title": "Planets", "lesson": "There are eight.", "quizzes": []},
                {"title": "Stars", "lesson": "The sun is a star.", "quizzes": [
                    {"question": "Is the sun a star?", "options": ["Yes", "No"], "correct_answer": 0},
                ]},
            ],
        })
        rows = build_stage_rows(quest)

        assert [stage["title"] for stage, _ in rows] == ["Planets", "Stars"]
        assert rows[1][0]["lesson_summary"] == "The sun is a star."
        assert rows[1][0]["order_index"] == 1
        assert len(rows[1][1]) == 1

    def test_lesson_blocks_stored_as_json(self):
        blocks = [{"type": "text", "content": "สวัสดี"}]
        quest = make_quest({
            "type": "lesson",
            "title": "Thai",
            "modules": [{"title": "Greetings", "content_blocks": blocks}],
        })
        stage, questions = build_stage_rows(quest)[0]

        assert json.loads(stage["lesson_summary"]) == blocks
        assert "สวัสดี" in stage["lesson_summary"]
        assert questions == []

    def test_flashcards_front_and_back(self):
        quest = make_quest({
            "type": "flashcard",
            "title": "Vocab",
            "cards": [{"front": "dog", "back": "หมา"}],
        })
        _, questions = build_stage_rows(quest)[0]

        assert questions[0]["question"] == "dog"
        assert questions[0]["explanation"] == "หมา"

    def test_correct_answer_must_index_options(self):
        with pytest.raises(ValidationError):
            make_quest({
                "type": "quiz",
                "title": "Bad",
                "quizzes": [{"question": "?", "options": ["a"], "correct_answer": 3}],
            })


class TestReconstructQuest:
    activity = {"title": "T", "description": "D", "thumbnail": None, "tags": ["x"]}

    def test_lesson(self):
        stages = [{"id": "s1", "title": "M1", "lesson_summary": json.dumps([{"type": "text"}])}]
        result = reconstruct_quest({**self.activity, "type": "lesson"}, stages, [])

        assert result["type"] == "lesson"
        assert result["modules"] == [{"title": "M1", "content_blocks": [{"type": "text"}]}]

    def test_lesson_with_broken_json_has_no_blocks(self):
        stages = [{"id": "s1", "title": "M1", "lesson_summary": "not json"}]
        result = reconstruct_quest({**self.activity, "type": "lesson"}, stages, [])

        assert result["modules"][0]["content_blocks"] == []

    def test_flashcard(self):
        questions = [{"question": "front", "explanation": "back"}]
        result = reconstruct_quest({**self.activity, "type": "flashcard"}, [{"id": "s1", "title": "T"}], questions)

        assert result["cards"] == [{"front": "front", "back": "back"}]

    def test_single_plain_stage_reads_as_quiz(self):
        stages = [{"id": "s1", "title": "T", "lesson_summary": ""}]
        questions = [{"stage_id": "s1", "question": "Q", "options": ["a", "b"], "correct_answer": 1}]
        result = reconstruct_quest({**self.activity, "type": "quest"}, stages, questions)

        assert result["type"] == "quiz"
        assert result["quizzes"][0]["correct_answer"] == 1

    def test_quest_groups_questions_by_stage(self):
        stages = [
            {"id": "s1", "title": "One", "lesson_summary": "L1"},
            {"id": "s2", "title": "Two", "lesson_summary": "L2"},
        ]
        questions = [
            {"stage_id": "s2", "question": "Q2"},
            {"stage_id": "s1", "question": "Q1"},
        ]
        result = reconstruct_quest({**self.activity, "type": "quest"}, stages, questions)

        assert result["type"] == "quest"
        assert [q["question"] for q in result["stages"][0]["quizzes"]] == ["Q1"]
        assert [q["question"] for q in result["stages"][1]["quizzes"]] == ["Q2"]
        assert result["stages"][1]["lesson"] == "L2"
