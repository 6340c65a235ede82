# Supabase tables: posts

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, not null)
- author_id: uuid (foreign key to auth.users.id, nullable, on delete set null)
- content: text (not null, check char_length(content) between 1 and 500)
- created_at: timestamptz (default: now())

Posts are insert-only. Reads embed the owning team: select("*, teams(name, handle)").
"""
