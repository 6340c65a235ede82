from app.core.actions import ActionResult, action, require_user
from app.core.exceptions import ValidationError
from app.core.validation import clean_post_content
from app.modules.auth.schemas import CurrentUser
from app.modules.posts.service import PostService
from app.modules.profiles.service import ProfileService
from typing import Optional


@action
def create_post(
    posts: PostService,
    profiles: ProfileService,
    user: Optional[CurrentUser],
    content: Optional[str],
) -> ActionResult:
    """Post on behalf of the caller's team. Content is validated before any backend call."""
    content = clean_post_content(content)
    user = require_user(user, "You must be signed in to post")
    profile = profiles.get_current_profile(user.id)
    if profile is None:
        raise ValidationError("You must belong to a team to post")
    posts.insert_post(profile.team_id, user.id, content)
    return ActionResult.redirect("/")
