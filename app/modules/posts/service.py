import logging
from supabase import Client
from postgrest.exceptions import APIError
from app.core.exceptions import BackendError, translate_api_error
from app.core.validation import clean_post_content
from app.modules.posts.schemas import PostResponse
from app.config import settings
from typing import List, Optional

logger = logging.getLogger(__name__)

MAX_FEED_LIMIT = 50
POST_WITH_TEAM = "*, teams(name, handle)"


def _cap(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return min(settings.feed_limit, MAX_FEED_LIMIT)
    return min(limit, MAX_FEED_LIMIT)


class PostService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_all_posts(self, limit: Optional[int] = None) -> List[PostResponse]:
        """Latest posts from every team, newest first"""
        try:
            result = self.supabase.table("posts")\
                .select(POST_WITH_TEAM)\
                .order("created_at", desc=True)\
                .limit(_cap(limit))\
                .execute()
            return [PostResponse(**post) for post in result.data or []]
        except APIError as e:
            raise translate_api_error(e)

    def list_posts_for_team(self, team_id: str, limit: Optional[int] = None) -> List[PostResponse]:
        try:
            result = self.supabase.table("posts")\
                .select(POST_WITH_TEAM)\
                .eq("team_id", team_id)\
                .order("created_at", desc=True)\
                .limit(_cap(limit))\
                .execute()
            return [PostResponse(**post) for post in result.data or []]
        except APIError as e:
            raise translate_api_error(e)

    def insert_post(self, team_id: str, author_id: str, content: str) -> PostResponse:
        content = clean_post_content(content)
        try:
            result = self.supabase.table("posts").insert({
                "team_id": team_id,
                "author_id": author_id,
                "content": content
            }).execute()
        except APIError as e:
            raise translate_api_error(e)
        if not result.data:
            raise BackendError("Failed to create post")
        logger.info(f"Post {result.data[0]['id']} created for team {team_id}")
        return PostResponse(**result.data[0])
