from fastapi import APIRouter, Depends
from supabase import Client
from app.core.dependencies import get_current_user, get_profile_service, get_supabase
from app.modules.auth.schemas import CurrentUser
from app.modules.follows import actions
from app.modules.follows.service import FollowService
from app.modules.profiles.service import ProfileService
from typing import Optional

router = APIRouter(prefix="/actions", tags=["follows"])


def get_follow_service(supabase: Client = Depends(get_supabase)) -> FollowService:
    return FollowService(supabase)


@router.post("/follow/{team_id}")
def follow(
    team_id: str,
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Follow another team as the caller's team"""
    return actions.follow_team(service, profiles, user, team_id).as_payload()


@router.post("/unfollow/{team_id}")
def unfollow(
    team_id: str,
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: FollowService = Depends(get_follow_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    return actions.unfollow_team(service, profiles, user, team_id).as_payload()
