"""
Request gate: decides where a page request must be redirected based on session and
team-membership state. Pure functions only; the middleware in app.core.session feeds them.
"""

from typing import Optional

LOGIN_PATH = "/login"
SIGNUP_PATH = "/signup"
HOME_PATH = "/"
ONBOARDING_PATH = "/onboarding"
AUTH_CALLBACK_PATH = "/auth/callback"

PROTECTED_PREFIXES = ("/compose", ONBOARDING_PATH)
AUTH_PAGE_PREFIXES = (LOGIN_PATH, SIGNUP_PATH)
EXEMPT_PREFIXES = ("/static", "/health", "/ready", "/actions/")


def is_exempt(path: str) -> bool:
    return path.startswith(EXEMPT_PREFIXES)


def is_auth_page(path: str) -> bool:
    return path.startswith(AUTH_PAGE_PREFIXES)


def is_onboarding(path: str) -> bool:
    return path.startswith(ONBOARDING_PATH)


def is_auth_callback(path: str) -> bool:
    return path.startswith(AUTH_CALLBACK_PATH)


def requires_auth(path: str) -> bool:
    return path.startswith(PROTECTED_PREFIXES)


def needs_profile(path: str, has_session: bool) -> bool:
    """Whether the decision for this request depends on the profile lookup."""
    return has_session and not is_auth_callback(path) and not is_auth_page(path)


def decide_redirect(path: str, has_session: bool, has_profile: bool) -> Optional[str]:
    """Return the path to redirect to, or None to let the request through.

    First match wins:
    1. anonymous on a protected page -> login
    2. signed in on login/signup -> home
    3. signed in without a profile anywhere but onboarding/callback -> onboarding
    4. signed in with a profile on onboarding -> home
    """
    if not has_session:
        if requires_auth(path):
            return LOGIN_PATH
        return None
    if is_auth_page(path):
        return HOME_PATH
    if is_auth_callback(path):
        return None
    if not has_profile and not is_onboarding(path):
        return ONBOARDING_PATH
    if has_profile and is_onboarding(path):
        return HOME_PATH
    return None
