"""
Seed Demo Teams Script
Creates a few confirmed demo users, their teams, some posts and follow edges.
Requires SUPABASE_SERVICE_ROLE_KEY. Safe to re-run: existing users are skipped.

    python -m app.scripts.seed_demo_teams
"""

import sys
import logging
from supabase import Client
from supabase_auth.errors import AuthError

from app.core.exceptions import AppError
from app.database.supabase_client import SupabaseClient
from app.modules.follows.service import FollowService
from app.modules.posts.service import PostService
from app.modules.teams.service import TeamService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo-password-123"

DEMO_TEAMS = [
    {
        "email": "jane@vizio.example",
        "full_name": "Jane Doe",
        "team_name": "Vizio Engineering",
        "handle": "vizio-engineering",
        "posts": [
            "Shipped the new onboarding flow today.",
            "Hiring: two backend engineers, remote friendly.",
        ],
    },
    {
        "email": "sam@acme.example",
        "full_name": "Sam Lee",
        "team_name": "Acme Design",
        "handle": "acme-design",
        "posts": ["New brand guidelines are live."],
    },
    {
        "email": "ana@orbit.example",
        "full_name": "Ana Silva",
        "team_name": "Orbit Ops",
        "handle": "orbit-ops",
        "posts": ["Zero incidents this sprint."],
    },
]


def seed_team(supabase: Client, demo: dict) -> str:
    """Create the user, their team and posts; returns the team id"""
    teams = TeamService(supabase)
    existing = teams.get_team_by_handle(demo["handle"])
    if existing:
        logger.info(f"Team @{demo['handle']} already exists, skipping")
        return existing.id

    user_response = supabase.auth.admin.create_user({
        "email": demo["email"],
        "password": DEMO_PASSWORD,
        "email_confirm": True,
        "user_metadata": {"full_name": demo["full_name"]}
    })
    user_id = user_response.user.id
    teams.create_team_and_profile(user_id, demo["team_name"], demo["handle"], demo["full_name"])
    team = teams.get_team_by_handle(demo["handle"])

    posts = PostService(supabase)
    for content in demo["posts"]:
        posts.insert_post(team.id, user_id, content)
    logger.info(f"Seeded @{demo['handle']} with {len(demo['posts'])} posts")
    return team.id


def seed_follows(supabase: Client, team_ids: list):
    """Every demo team follows the next one"""
    follows = FollowService(supabase)
    for follower, following in zip(team_ids, team_ids[1:] + team_ids[:1]):
        try:
            follows.insert_follow(follower, following)
        except AppError as e:
            logger.debug(f"Skipping follow {follower} -> {following}: {e.message}")


def main():
    """Main function to seed demo data"""
    try:
        supabase = SupabaseClient.service_client()
    except RuntimeError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info("Starting demo seeding...")
    team_ids = []
    for demo in DEMO_TEAMS:
        try:
            team_ids.append(seed_team(supabase, demo))
        except (AppError, AuthError) as e:
            logger.error(f"Error seeding team {demo['handle']}: {getattr(e, 'message', e)}")
    if len(team_ids) > 1:
        seed_follows(supabase, team_ids)
    logger.info(f"Seeding completed: {len(team_ids)} teams")


if __name__ == "__main__":
    main()
