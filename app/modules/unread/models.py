# Supabase table: group_reads
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- last_read_at: timestamp (not null)
- unique constraint on (group_id, user_id) - upsert target

Never shown to users; only compared against group_messages.created_at.
"""
