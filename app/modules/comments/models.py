# Supabase table: comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

comments:
- id: uuid (primary key)
- post_id: uuid (foreign key to posts.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id via comments_user_id_fkey, on delete cascade)
- parent_id: uuid (foreign key to comments.id, on delete cascade) - null for top level
- body: text (not null)
- status: comment_status enum ('pending', 'approved', 'spam'), default 'pending'
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

Only approved comments are public. Replies are one level deep.
"""

COMMENT_STATUSES = ("pending", "approved", "spam")
MAX_COMMENT_LENGTH = 5000

COMMENT_SELECT = "*, author:profiles!comments_user_id_fkey(id, display_name, avatar_url)"
ADMIN_COMMENT_SELECT = COMMENT_SELECT + ", post:posts!comments_post_id_fkey(id, title, slug)"
