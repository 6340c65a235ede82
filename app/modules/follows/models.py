# Supabase tables: follows

"""
Expected Supabase table structure:

follows:
- follower_team_id: uuid (foreign key to teams.id, not null)
- following_team_id: uuid (foreign key to teams.id, not null)
- created_at: timestamptz (default: now())
- primary key (follower_team_id, following_team_id)
- check (follower_team_id <> following_team_id)
"""
