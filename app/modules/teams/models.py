# Supabase tables: group_teams, group_team_slots
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Formation changes go through the set_team_formation() Postgres function

"""
Expected Supabase table structure:

group_teams:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null) - unique, one team per group
- name: text (not null)
- starters_count: integer (not null, 1..11) - only 5, 7 and 11 have formations
- formation: text (nullable) - key in FOOTBALL_FORMATIONS_BY_COUNT[starters_count]
- owner_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())

group_team_slots:
- id: uuid (primary key)
- team_id: uuid (foreign key to group_teams.id, on delete cascade, not null)
- index: integer (not null) - unique on (team_id, index)
- role: text (nullable) - GK, DEF, MID, ATT
- x: float (not null, 0..1)
- y: float (not null, 0..1) - 0 = own goal line
- user_id: uuid (nullable) - unique on (team_id, user_id) when not null
"""
