import logging
from supabase import Client
from postgrest.exceptions import APIError
from app.core.exceptions import DuplicateFollow, SelfReference, translate_api_error

logger = logging.getLogger(__name__)


class FollowService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def insert_follow(self, follower_team_id: str, following_team_id: str) -> None:
        if follower_team_id == following_team_id:
            raise SelfReference()
        try:
            self.supabase.table("follows").insert({
                "follower_team_id": follower_team_id,
                "following_team_id": following_team_id
            }).execute()
        except APIError as e:
            raise translate_api_error(e, conflict=DuplicateFollow)
        logger.info(f"Team {follower_team_id} followed {following_team_id}")

    def delete_follow(self, follower_team_id: str, following_team_id: str) -> None:
        """Remove the edge; a missing edge is not an error"""
        try:
            self.supabase.table("follows")\
                .delete()\
                .eq("follower_team_id", follower_team_id)\
                .eq("following_team_id", following_team_id)\
                .execute()
        except APIError as e:
            raise translate_api_error(e)
        logger.info(f"Team {follower_team_id} unfollowed {following_team_id}")

    def is_following(self, follower_team_id: str, following_team_id: str) -> bool:
        try:
            result = self.supabase.table("follows")\
                .select("follower_team_id")\
                .eq("follower_team_id", follower_team_id)\
                .eq("following_team_id", following_team_id)\
                .limit(1)\
                .execute()
            return bool(result.data)
        except APIError as e:
            raise translate_api_error(e)
