# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- user_id: uuid (primary key, references auth.users.id)
- username: text (nullable) - must be set before using social features
- name: text (nullable) - defaults to the sign-up email
- avatar_url: text (nullable) - public URL in the profile-pictures bucket
- score: integer (not null, default: 0, >= 0)
- completed_challenges: integer (not null, default: 0, >= 0)
- last_active: timestamp (nullable)
- created_at: timestamp (default: now())

score and completed_challenges are only written by the task lifecycle
(credit on completion); profile edits never touch them.
"""
