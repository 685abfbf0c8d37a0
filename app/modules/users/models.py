# Supabase tables: profiles, activities, reports
# This file documents how the admin user views read the database
# Actual operations are handled via Supabase SDK in service.py

"""
Admin user management works on public.profiles (see app/modules/auth/models.py
for the column list). Derived values:

- activity_count: rows in activities with user_id = profiles.id
- total_plays: sum of activities.play_count over the user's activities
- reports_count: rows in reports with reporter_id = profiles.id
- reports_against_count: reports whose content_id is one of the user's activities
- pending deletion: profiles.deleted_at is not null; the account is purged
  ACCOUNT_DELETION_GRACE_DAYS after deleted_at
"""

RECENT_USER_ACTIVITIES_LIMIT = 10
USER_SORT_FIELDS = ("created_at", "display_name", "activity_count")
