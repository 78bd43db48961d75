# Supabase table: Tasks
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

Tasks (catalog the home page draws random tasks from):
- id: bigint (primary key, identity)
- description: text (not null)
- category: text (nullable)
- difficulty: text (nullable) - easy | medium | hard, treated as medium when missing
- created_at: timestamp (default: now())
"""
