# Supabase tables: collections, saved_items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

collections:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, on delete cascade)
- name: text (not null)
- created_at: timestamptz (default: now())

saved_items:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, on delete cascade)
- activity_id: uuid (foreign key to activities.id, on delete cascade)
- collection_id: uuid (foreign key to collections.id, on delete set null) - null means no collection
- created_at: timestamptz (default: now())
- unique constraint on (user_id, activity_id): an activity is saved at most once per user
"""

# Virtual collection containing every saved item
ALL_COLLECTION_ID = "all"
ALL_COLLECTION_NAME = "All"

UNIQUE_VIOLATION = "23505"
