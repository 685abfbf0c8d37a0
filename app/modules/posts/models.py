# Supabase table: posts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id via posts_user_id_profiles_fkey, on delete set null)
- title: text (not null)
- slug: text (unique, not null)
- excerpt: text (nullable)
- body: text (nullable) - editor JSON or HTML
- thumbnail: text (nullable)
- category_id: uuid (foreign key to categories.id, on delete set null)
- tags: text[] (nullable)
- status: post_status enum ('draft', 'scheduled', 'published', 'archived'), default 'draft'
- published_at: timestamptz (nullable)
- meta_title: text (nullable)
- meta_description: text (nullable)
- view_count: integer (default: 0)
- featured: boolean (default: false)
- pinned: boolean (default: false)
- allow_comments: boolean (default: true)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

RPC:
- increment_post_view_count(post_id uuid)
"""

POST_STATUSES = ("draft", "scheduled", "published", "archived")
POST_SORT_FIELDS = ("created_at", "updated_at", "published_at", "title", "view_count")

POST_SELECT = (
    "*, category:categories(*), "
    "author:profiles!posts_user_id_profiles_fkey(id, display_name, avatar_url)"
)
