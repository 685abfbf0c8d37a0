# Supabase tables: system_settings, ai_usage_logs
# This file documents the expected database schema and the setting defaults
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

system_settings:
- id: uuid (primary key)
- key: text (unique, not null)
- value: jsonb (not null)
- description: text (nullable)
- updated_at: timestamptz (default: now())
- updated_by: uuid (foreign key to auth.users.id, nullable)

ai_usage_logs:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, nullable)
- action: text (not null) - values: see AI_USAGE_ACTIONS
- input_tokens: integer (default: 0)
- output_tokens: integer (default: 0)
- total_tokens: integer (default: 0)
- model: text (default: 'gemini-2.0-flash')
- created_at: timestamptz (default: now())

profiles.ai_credits (integer) holds the balance charged by the credit
functions; admins are never charged.
"""

DEFAULT_SETTINGS = {
    "site_name": "QzVert",
    "site_description": "AI-powered Learning Platform",
    "maintenance_mode": False,
    "maintenance_message": "We are currently performing maintenance. Please check back soon.",
    "ai_credits_per_user": 100,
    "ai_credits_per_generation": 10,
    "tier_monthly_credits": {"user": 10, "plus": 300, "pro": 1200, "ultra": 2500, "admin": 0},
    "tier_package_price": {"user": 0, "plus": 199, "pro": 599, "ultra": 999, "admin": 0},
    "enable_public_activities": True,
    "enable_user_registration": True,
    "enable_ai_generation": True,
    "require_email_verification": False,
}

PUBLIC_SETTING_KEYS = ("site_name", "site_description", "maintenance_mode", "maintenance_message")

AI_USAGE_ACTIONS = (
    "summarize", "craft", "translate",
    "generate_quiz", "generate_quest", "generate_lesson", "deep_lesson",
)

STORAGE_BUCKETS = ("thumbnails", "extracted-files")
STORAGE_LIMIT_MB = 1024

# Tables whose row counts are shown on the admin settings page
DATABASE_STAT_TABLES = (
    "profiles", "activities", "stages", "questions", "activity_play_records",
    "posts", "comments", "categories", "reports", "saved_items", "collections",
)

TIERS = ("user", "plus", "pro", "ultra", "admin")

# Credit accounting; stored under the same system_settings keys
DEFAULT_CREDIT_SETTINGS = {
    "token_estimation_ratios": {
        "summarize": 0.3,
        "lesson": 1.5,
        "translate": 1.1,
        "easy_explain_modifier": 0.2,
    },
    "tier_pricing_config": {
        "mode": "markup",
        "tiers": {
            "user": {"markup": 100, "fixed": 0.05},
            "plus": {"markup": 50, "fixed": 0.03},
            "pro": {"markup": 30, "fixed": 0.025},
            "ultra": {"markup": 20, "fixed": 0.02},
            "admin": {"markup": 0, "fixed": 0},
        },
    },
    "credit_conversion_rate": 10,
    "usd_to_thb_rate": 35,
    "gemini_input_price": 0.10,
    "gemini_output_price": 0.40,
}

CREDIT_SETTING_KEYS = tuple(DEFAULT_CREDIT_SETTINGS)

# Characters per token for estimates
CHARS_PER_TOKEN = 4

CHART_RANGE_DAYS = {"week": 7, "month": 30, "year": 365}
