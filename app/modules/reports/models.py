# Supabase table: reports
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

reports:
- id: uuid (primary key)
- content_type: content_type enum ('activity', 'profile', 'comment')
- content_id: uuid (not null) - id of the reported row in the table named by content_type
- reporter_id: uuid (foreign key to auth.users.id, on delete set null) - null for guests
- reason: report_reason enum ('spam', 'inappropriate', 'harassment', 'misinformation', 'copyright', 'other')
- additional_info: text (nullable)
- status: report_status enum ('pending', 'reviewed', 'resolved', 'dismissed'), default 'pending'
- admin_notes: text (nullable)
- reviewed_by: uuid (foreign key to auth.users.id, on delete set null)
- reviewed_at: timestamptz (nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())
"""

REPORT_STATUSES = ("pending", "reviewed", "resolved", "dismissed")

# content_type -> (table, columns shown next to the report)
REPORT_TARGETS = {
    "activity": ("activities", "id, title, thumbnail, user_id"),
    "profile": ("profiles", "id, display_name, avatar_url"),
    "comment": ("comments", "id, body, post_id, user_id"),
}
