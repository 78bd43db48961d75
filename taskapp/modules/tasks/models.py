# Supabase tables: assignments, GeneratedTasks
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

assignments (user-to-user challenges, reviewed by the assigner):
- id: bigint (primary key, identity)
- created_at: timestamp (default: now())
- task_description: text (not null)
- difficulty: text (not null) - easy | medium | hard
- duration: text (nullable) - "<N> minutes", written on submission
- proof_url: text (nullable) - public URL in the task-proofs bucket
- comment: text (nullable) - submitter's note
- status: text (not null, default: 'pending') - pending | submitted | declined | completed
- assigned_to: uuid (foreign key to profiles.user_id, not null) - recipient
- assigned_by: uuid (foreign key to profiles.user_id, not null) - assigner and reviewer
- points: integer (not null) - difficulty points, +25 for proof, +25 on approval
- review_comment: text (nullable)

GeneratedTasks (catalog tasks taken by a user for themselves or handed to a friend):
- id: bigint (primary key, identity)
- created_at: timestamp (default: now())
- task_description: text (not null)
- category: text (nullable)
- difficulty: text (not null)
- duration: text (nullable) - "<N> minutes", written on completion
- proof_url: text (nullable)
- comment: text (nullable)
- status: text (not null, default: 'pending') - pending | completed
- user_id: uuid (foreign key to profiles.user_id, not null) - owner
- assigned_by: text (not null) - 'application' or the assigning friend's user_id
- points: integer (nullable) - difficulty points fixed at creation

Every status change is written with a filter on the status it was read in,
so a concurrent transition makes the second writer's update match no row.
"""
