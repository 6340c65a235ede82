# Supabase tables: teams
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# DDL, policies and procedures live in supabase/migrations/

"""
Expected Supabase table structure:

teams:
- id: uuid (primary key, default gen_random_uuid())
- name: text (not null)
- handle: text (unique, not null, check handle ~ '^[a-z0-9_-]+$')
- invite_code: text (unique, not null, default 8 random hex chars; not selectable by clients)
- created_at: timestamptz (default: now())

Procedures (security definer, single transaction each):
- create_team_and_profile(_user_id, _team_name, _team_handle, _full_name)
  inserts teams + profiles rows; unique violations on teams_handle_key / profiles_pkey abort both.
- join_team(_user_id, _team_id, _invite_code, _full_name)
  raises 'invalid_invite_code' unless the code matches the team, then inserts the profiles row.
- find_team_by_invite_code(_invite_code) -> id, name, handle, created_at
- team_invite_code(_team_id) -> the code, only when _team_id is the caller's team
- regenerate_invite_code(_team_id, _invite_code) -> not_authorized unless it is the caller's team

The handle is never updated; invite_code is the only mutable column.
"""
