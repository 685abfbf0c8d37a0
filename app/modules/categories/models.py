# Supabase table: categories
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

categories:
- id: uuid (primary key)
- name: text (not null)
- slug: text (unique, not null)
- description: text (nullable)
- parent_id: uuid (foreign key to categories.id, on delete set null) - null for top level
- order_index: integer (default: 0)
- created_at: timestamptz (default: now())

Referenced by posts.category_id and activities.category_id (on delete set null);
deletion is refused while references exist.
"""
