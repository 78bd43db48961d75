# Supabase table: messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

messages:
- id: bigint (primary key, identity) - used as the conversation cursor
- sender_id: uuid (foreign key to profiles.user_id, not null)
- receiver_id: uuid (foreign key to profiles.user_id, not null)
- content: text (not null)
- is_read: boolean (not null, default: false)
- created_at: timestamp (default: now())
"""
