import logging
from app.core.actions import ActionResult, action, require_user
from app.core.exceptions import InvalidInviteCode, NotFound
from app.core.validation import clean_invite_code, clean_optional, clean_team_name, derive_handle
from app.modules.auth.schemas import CurrentUser
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService
from app.modules.teams.schemas import TeamCreate, TeamJoin
from app.modules.teams.service import TeamService
from typing import Optional

logger = logging.getLogger(__name__)

OWN_TEAM_ONLY = "You can only regenerate codes for your own team"


def team_path(handle: str) -> str:
    return f"/team/{handle}"


def _existing_team_path(teams: TeamService, profile: ProfileResponse) -> str:
    if profile.team:
        return team_path(profile.team.handle)
    team = teams.get_team_by_id(profile.team_id)
    return team_path(team.handle) if team else "/"


@action
def create_team(
    teams: TeamService,
    profiles: ProfileService,
    user: Optional[CurrentUser],
    form: TeamCreate,
) -> ActionResult:
    """Create a team with the caller as its first member"""
    user = require_user(user)
    team_name = clean_team_name(form.team_name)
    handle = derive_handle(team_name, form.handle)
    existing = profiles.get_current_profile(user.id)
    if existing:
        return ActionResult.redirect(_existing_team_path(teams, existing))
    teams.create_team_and_profile(user.id, team_name, handle, clean_optional(form.full_name))
    return ActionResult.redirect(team_path(handle))


@action
def join_team(
    teams: TeamService,
    profiles: ProfileService,
    user: Optional[CurrentUser],
    form: TeamJoin,
) -> ActionResult:
    """Join an existing team with its invite code, optionally scoped to a picked team"""
    user = require_user(user)
    invite_code = clean_invite_code(form.invite_code)
    existing = profiles.get_current_profile(user.id)
    if existing:
        return ActionResult.redirect(_existing_team_path(teams, existing))
    team_id = clean_optional(form.team_id)
    if team_id:
        team = teams.get_team_by_id(team_id)
        if team is None:
            raise NotFound("Team not found")
    else:
        team = teams.get_team_by_invite_code(invite_code)
        if team is None:
            raise InvalidInviteCode()
    teams.join_team_by_invite_code(user.id, team.id, invite_code, clean_optional(form.full_name))
    return ActionResult.redirect(team_path(team.handle))


@action
def regenerate_invite_code(
    teams: TeamService,
    profiles: ProfileService,
    user: Optional[CurrentUser],
    team_id: str,
) -> ActionResult:
    user = require_user(user)
    profile = profiles.get_current_profile(user.id)
    if profile is None or profile.team_id != team_id:
        return ActionResult.fail(OWN_TEAM_ONLY)
    invite_code = teams.regenerate_invite_code(team_id)
    return ActionResult.ok(invite_code=invite_code)
