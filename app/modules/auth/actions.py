"""
Sign in, sign up, OAuth and sign out handlers.

After any successful sign in the caller lands on onboarding when they have no profile
yet, otherwise on the feed (or a safe `next` path for the OAuth callback).
"""

from pydantic import ValidationError as SchemaError
from app.core.actions import ActionResult, action, safe_next_path
from app.core.exceptions import ValidationError
from app.core.gate import HOME_PATH, LOGIN_PATH, ONBOARDING_PATH
from app.modules.auth.schemas import SignInRequest, SignUpRequest, CurrentUser
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService
from app.core.validation import clean_optional
from typing import Optional

CHECK_EMAIL_PATH = f"{LOGIN_PATH}?notice=check-email"


def _landing(profiles: ProfileService, user: CurrentUser, default: str = HOME_PATH) -> str:
    if profiles.get_current_profile(user.id) is None:
        return ONBOARDING_PATH
    return default


@action
def sign_in(
    auth: AuthService,
    profiles: ProfileService,
    email: Optional[str],
    password: Optional[str],
) -> ActionResult:
    try:
        credentials = SignInRequest(email=(email or "").strip(), password=password or "")
    except SchemaError:
        raise ValidationError("A valid email and password are required")
    user = auth.sign_in_with_password(credentials)
    return ActionResult.redirect(_landing(profiles, user))


@action
def sign_up(
    auth: AuthService,
    profiles: ProfileService,
    email: Optional[str],
    password: Optional[str],
    full_name: Optional[str] = None,
) -> ActionResult:
    try:
        registration = SignUpRequest(
            email=(email or "").strip(),
            password=password or "",
            full_name=clean_optional(full_name),
        )
    except SchemaError:
        raise ValidationError("A valid email and password are required")
    user, has_session = auth.sign_up(registration)
    if not has_session:
        return ActionResult.redirect(CHECK_EMAIL_PATH)
    return ActionResult.redirect(_landing(profiles, user))


@action
def start_oauth(auth: AuthService, callback_url: str) -> ActionResult:
    return ActionResult.redirect(auth.oauth_url(callback_url))


@action
def complete_oauth(
    auth: AuthService,
    profiles: ProfileService,
    code: Optional[str],
    callback_url: str,
    next_path: Optional[str] = None,
) -> ActionResult:
    if not code:
        raise ValidationError("Missing authorization code")
    user = auth.exchange_code_for_session(code, callback_url)
    return ActionResult.redirect(_landing(profiles, user, safe_next_path(next_path)))


@action
def sign_out(auth: AuthService) -> ActionResult:
    auth.sign_out()
    return ActionResult.redirect(HOME_PATH)
