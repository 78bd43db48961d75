# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

notifications:
- id: bigint (primary key, identity) - monotonically increasing, used as the feed cursor
- user_id: uuid (foreign key to profiles.user_id, not null) - recipient
- sender_id: uuid (foreign key to profiles.user_id, nullable, constraint fk_sender)
- message: text (not null)
- is_read: boolean (not null, default: false)
- assignment_id: bigint (foreign key to assignments.id, nullable) - set for "review this submission"
- created_at: timestamp (default: now())

Rows are append-only; only the recipient marks them read or deletes them.
"""
