import asyncio
import logging
import secrets
from supabase import Client
from postgrest.exceptions import APIError
from starlette.concurrency import run_in_threadpool
from app.core.exceptions import (
    Conflict, DuplicateHandle, DuplicateMembership, translate_api_error
)
from app.modules.teams.schemas import TeamResponse, TeamStats
from app.config import settings
from typing import List, Optional

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 8
# invite_code is not readable by clients; see team_invite_code
TEAM_COLUMNS = "id, name, handle, created_at"


def generate_invite_code() -> str:
    return secrets.token_hex(INVITE_CODE_LENGTH // 2)


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_teams(self) -> List[TeamResponse]:
        """All teams ordered by name, for the team directory"""
        try:
            result = self.supabase.table("teams")\
                .select(TEAM_COLUMNS)\
                .order("name")\
                .execute()
            return [TeamResponse(**team) for team in result.data or []]
        except APIError as e:
            raise translate_api_error(e)

    def _get_team_by(self, column: str, value: str) -> Optional[TeamResponse]:
        try:
            result = self.supabase.table("teams")\
                .select(TEAM_COLUMNS)\
                .eq(column, value)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return TeamResponse(**result.data[0])
        except APIError as e:
            raise translate_api_error(e)

    def get_team_by_handle(self, handle: str) -> Optional[TeamResponse]:
        return self._get_team_by("handle", handle)

    def get_team_by_id(self, team_id: str) -> Optional[TeamResponse]:
        return self._get_team_by("id", team_id)

    def get_team_by_invite_code(self, invite_code: str) -> Optional[TeamResponse]:
        try:
            result = self.supabase.rpc("find_team_by_invite_code", {
                "_invite_code": invite_code
            }).execute()
        except APIError as e:
            raise translate_api_error(e)
        if not result.data:
            return None
        return TeamResponse(**result.data[0])

    def get_invite_code(self, team_id: str) -> Optional[str]:
        """Invite code of the caller's own team; None for any other team"""
        try:
            result = self.supabase.rpc("team_invite_code", {"_team_id": team_id}).execute()
        except APIError as e:
            raise translate_api_error(e)
        return result.data or None

    def _count(self, table: str, column: str, team_id: str) -> int:
        try:
            result = self.supabase.table(table)\
                .select("*", count="exact", head=True)\
                .eq(column, team_id)\
                .execute()
            return result.count or 0
        except APIError as e:
            raise translate_api_error(e)

    def count_followers(self, team_id: str) -> int:
        return self._count("follows", "following_team_id", team_id)

    def count_following(self, team_id: str) -> int:
        return self._count("follows", "follower_team_id", team_id)

    def count_members(self, team_id: str) -> int:
        return self._count("profiles", "team_id", team_id)

    async def get_team_stats(self, team_id: str) -> TeamStats:
        """Follower, following and member counts, fetched concurrently"""
        followers, following, members = await asyncio.gather(
            run_in_threadpool(self.count_followers, team_id),
            run_in_threadpool(self.count_following, team_id),
            run_in_threadpool(self.count_members, team_id),
        )
        return TeamStats(followers=followers, following=following, members=members)

    def create_team_and_profile(
        self,
        user_id: str,
        team_name: str,
        handle: str,
        full_name: Optional[str] = None
    ) -> None:
        """Create the team and the caller's profile in one transaction"""
        try:
            self.supabase.rpc("create_team_and_profile", {
                "_user_id": user_id,
                "_team_name": team_name,
                "_team_handle": handle,
                "_full_name": full_name
            }).execute()
        except APIError as e:
            raise translate_api_error(e, conflict=DuplicateHandle)
        logger.info(f"Team @{handle} created by user {user_id}")

    def join_team_by_invite_code(
        self,
        user_id: str,
        team_id: str,
        invite_code: str,
        full_name: Optional[str] = None
    ) -> None:
        """Create the caller's profile on an existing team; the procedure re-checks the code"""
        try:
            self.supabase.rpc("join_team", {
                "_user_id": user_id,
                "_team_id": team_id,
                "_invite_code": invite_code,
                "_full_name": full_name
            }).execute()
        except APIError as e:
            raise translate_api_error(e, conflict=DuplicateMembership)
        logger.info(f"User {user_id} joined team {team_id}")

    def regenerate_invite_code(self, team_id: str) -> str:
        """Replace the team's invite code, retrying on the rare unique collision"""
        attempts = max(1, settings.invite_code_attempts)
        for attempt in range(1, attempts + 1):
            invite_code = generate_invite_code()
            try:
                self.supabase.rpc("regenerate_invite_code", {
                    "_team_id": team_id,
                    "_invite_code": invite_code
                }).execute()
            except APIError as e:
                error = translate_api_error(e)
                if not isinstance(error, Conflict):
                    raise error
                logger.warning(f"Invite code collision for team {team_id}, attempt {attempt}")
                continue
            logger.info(f"Invite code regenerated for team {team_id}")
            return invite_code
        raise Conflict("Could not generate a unique invite code, please try again")
