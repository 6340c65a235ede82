from app.core.actions import ActionResult, action, require_user
from app.core.exceptions import NotFound
from app.modules.auth.schemas import CurrentUser
from app.modules.follows.service import FollowService
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService
from typing import Optional


def _follower_profile(profiles: ProfileService, user: Optional[CurrentUser]) -> ProfileResponse:
    user = require_user(user)
    profile = profiles.get_current_profile(user.id)
    if profile is None:
        raise NotFound("No team found")
    return profile


@action
def follow_team(
    follows: FollowService,
    profiles: ProfileService,
    user: Optional[CurrentUser],
    target_team_id: str,
) -> ActionResult:
    profile = _follower_profile(profiles, user)
    follows.insert_follow(profile.team_id, target_team_id)
    return ActionResult.ok(following=True)


@action
def unfollow_team(
    follows: FollowService,
    profiles: ProfileService,
    user: Optional[CurrentUser],
    target_team_id: str,
) -> ActionResult:
    profile = _follower_profile(profiles, user)
    follows.delete_follow(profile.team_id, target_team_id)
    return ActionResult.ok(following=False)
