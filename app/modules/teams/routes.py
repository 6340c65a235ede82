import asyncio
from fastapi import APIRouter, Depends, Form, Request
from starlette.concurrency import run_in_threadpool
from supabase import Client
from app.config import settings
from app.core.dependencies import (
    get_current_user, get_profile_service, get_supabase, load_current_profile
)
from app.core.exceptions import NotFound
from app.core.templating import form_response, render
from app.modules.auth.schemas import CurrentUser
from app.modules.follows.routes import get_follow_service
from app.modules.follows.service import FollowService
from app.modules.posts.routes import get_post_service
from app.modules.posts.service import PostService
from app.modules.profiles.service import ProfileService
from app.modules.teams import actions
from app.modules.teams.schemas import TeamCreate, TeamJoin
from app.modules.teams.service import TeamService
from typing import Optional

router = APIRouter(tags=["teams"])


def get_team_service(supabase: Client = Depends(get_supabase)) -> TeamService:
    return TeamService(supabase)


@router.get("/team/{handle}")
async def team_page(
    request: Request,
    handle: str,
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    posts: PostService = Depends(get_post_service),
    follows: FollowService = Depends(get_follow_service)
):
    """Team profile: header, stats, follow control, invite code for members, posts"""
    team = await run_in_threadpool(service.get_team_by_handle, handle)
    if team is None:
        raise NotFound("Team not found")

    team_posts, stats = await asyncio.gather(
        run_in_threadpool(posts.list_posts_for_team, team.id, settings.feed_limit),
        service.get_team_stats(team.id),
    )

    is_own_team = False
    is_following = False
    invite_code = None
    if user is not None:
        profile = await run_in_threadpool(load_current_profile, request)
        if profile is not None:
            is_own_team = profile.team_id == team.id
            if is_own_team:
                invite_code = await run_in_threadpool(service.get_invite_code, team.id)
            else:
                is_following = await run_in_threadpool(
                    follows.is_following, profile.team_id, team.id
                )

    return render(request, "team.html", {
        "team": team,
        "posts": team_posts,
        "stats": stats,
        "is_own_team": is_own_team,
        "is_following": is_following,
        "invite_code": invite_code,
    })


def _onboarding_context(service: TeamService, user: Optional[CurrentUser], **extra) -> dict:
    context = {
        "teams": service.list_teams(),
        "full_name": (user.full_name or "") if user else "",
        "team_name": "",
        "handle": "",
        "invite_code": "",
    }
    context.update(extra)
    return context


@router.get("/onboarding")
def onboarding_page(
    request: Request,
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: TeamService = Depends(get_team_service)
):
    """Create a new team or join one with an invite code"""
    return render(request, "onboarding.html", _onboarding_context(service, user))


@router.post("/onboarding/create")
def onboarding_create(
    request: Request,
    team_name: str = Form(""),
    handle: str = Form(""),
    full_name: str = Form(""),
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    form = TeamCreate(team_name=team_name, handle=handle, full_name=full_name)
    result = actions.create_team(service, profiles, user, form)
    context = {}
    if result.error:
        context = _onboarding_context(
            service, user, team_name=team_name, handle=handle, full_name=full_name
        )
    return form_response(request, result, "onboarding.html", context)


@router.post("/onboarding/join")
def onboarding_join(
    request: Request,
    invite_code: str = Form(""),
    team_id: str = Form(""),
    full_name: str = Form(""),
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    form = TeamJoin(invite_code=invite_code, team_id=team_id, full_name=full_name)
    result = actions.join_team(service, profiles, user, form)
    context = {}
    if result.error:
        context = _onboarding_context(
            service, user, invite_code=invite_code, full_name=full_name,
            selected_team_id=team_id
        )
    return form_response(request, result, "onboarding.html", context)


@router.post("/actions/invite-code/{team_id}")
def regenerate_invite_code(
    team_id: str,
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Issue a fresh invite code for the caller's own team"""
    return actions.regenerate_invite_code(service, profiles, user, team_id).as_payload()
