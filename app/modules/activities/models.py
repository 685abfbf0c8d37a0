# Supabase tables: activities, stages, questions, activity_pending_invites, activity_play_records
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

activities:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, on delete cascade) - creator
- title: text (not null)
- description: text (nullable)
- thumbnail: text (nullable) - public URL, usually in the thumbnails bucket
- tags: text[] (nullable)
- raw_content: text (not null) - source material the activity was generated from
- theme_config: jsonb - {theme, maxLives, livesEnabled, timerEnabled, timerSeconds}
- play_count: integer (default: 0)
- type: text (not null) - values: quiz, quest, lesson, flashcard, roleplay
- status: creation_status enum (default: 'draft') - values: draft, private_group, link, public
- category_id: uuid (foreign key to categories.id, nullable)
- replay_limit: integer (nullable) - null means unlimited completed plays
- available_from: timestamptz (nullable)
- available_until: timestamptz (nullable)
- time_limit_minutes: integer (nullable)
- age_range: text (nullable)
- created_at: timestamptz (default: now())

stages:
- id: uuid (primary key)
- activity_id: uuid (foreign key to activities.id, on delete cascade)
- title: text (not null)
- lesson_summary: text (not null) - lesson text; for lessons a JSON array of content blocks
- order_index: integer (not null)

questions:
- id: uuid (primary key)
- stage_id: uuid (foreign key to stages.id, on delete cascade)
- question: text (not null)
- options: jsonb (not null) - list of strings, [] for non multiple choice
- correct_answer: integer (not null) - index into options, 0 for non multiple choice
- explanation: text (not null)
- order_index: integer (default: 0)

activity_pending_invites:
- id: uuid (primary key)
- activity_id: uuid (foreign key to activities.id, on delete cascade)
- email: text (not null, lowercased)
- created_at: timestamptz (default: now())
- unique constraint on (activity_id, email)

activity_play_records:
- id: uuid (primary key)
- activity_id: uuid (foreign key to activities.id, on delete cascade)
- user_id: uuid (foreign key to auth.users.id, on delete cascade)
- played_at: timestamptz (default: now())
- started_at: timestamptz (default: now())
- score: integer (nullable)
- duration_seconds: integer (nullable)
- completed: boolean (default: false)

RPC functions:
- can_user_play_activity(p_activity_id, p_user_id) -> jsonb
- record_activity_play(p_activity_id, p_user_id, p_score, p_duration_seconds, p_completed) -> uuid
"""

ACTIVITY_TYPES = ("quiz", "quest", "lesson", "flashcard", "roleplay")
ACTIVITY_STATUSES = ("draft", "private_group", "link", "public")

DEFAULT_THEME_CONFIG = {
    "theme": "adventure",
    "maxLives": 3,
    "livesEnabled": True,
    "timerEnabled": False,
    "timerSeconds": 30,
}

PUBLISHED_ACTIVITIES_LIMIT = 20
RECENT_PLAYS_LIMIT = 5
SUGGESTION_COLUMNS = "id, title, description, thumbnail, type, play_count, tags"
