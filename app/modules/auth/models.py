# Supabase Auth + profiles
# Authentication is delegated to Supabase Auth; application data about a user
# lives in the public.profiles table (one row per auth.users row).

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, foreign key to auth.users.id, on delete cascade)
- display_name: text (nullable)
- avatar_url: text (nullable)
- email: text (nullable)
- role: user_role enum (default: 'user') - values: user, plus, pro, ultra, admin
- ai_credits: integer (default: 0) - balance spent by AI generation
- metadata: jsonb (default: '{}')
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())
- deleted_at: timestamptz (nullable) - set when the owner requests deletion;
  rows older than ACCOUNT_DELETION_GRACE_DAYS are purged by a database job

Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.admin.sign_out(jwt) - Revoke a user token (service-role client)
"""

ACCOUNT_DELETION_GRACE_DAYS = 30
USER_ROLES = ("user", "plus", "pro", "ultra", "admin")
