# Supabase tables: profiles
# A profile binds one authenticated user (auth.users) to exactly one team.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id on delete cascade)
- team_id: uuid (foreign key to teams.id, not null)
- full_name: text (nullable)
- created_at: timestamptz (default: now())

Rows are only ever inserted by the create_team_and_profile / join_team procedures;
the primary key guarantees at most one profile per user.
"""
