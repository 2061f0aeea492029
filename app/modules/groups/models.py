# Supabase tables: groups, group_members, group_messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL: supabase/migrations/20260101000000_group_collaboration.sql

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- name: text (not null)
- owner_id: uuid (foreign key to auth.users.id, not null) - immutable after creation
- created_at: timestamp (default: now())

group_members:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (group_id, user_id)

group_messages:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- sender_id: uuid (foreign key to auth.users.id, not null)
- content: text (not null)
- created_at: timestamp (default: now()) - server clock, defines message order
Rows are never updated or deleted except when the whole group is deleted.
"""
