# Supabase Auth (auth.users) - managed entirely by Supabase
# This module holds no tables of its own

"""
Authentication data (password hashes, OAuth identities, tokens) lives in the
auth.users table managed by Supabase Auth. The application-owned profile row
is created on first authenticated request (see profiles.models).
"""
