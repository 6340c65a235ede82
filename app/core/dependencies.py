"""
Request-scoped dependencies: the per-request Supabase client, the signed-in user and
their profile, all prepared by the session middleware in app.core.session.
"""

from fastapi import Depends, Request
from supabase import Client
from app.modules.auth.schemas import CurrentUser
from app.modules.auth.service import AuthService
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService
from typing import Optional

_NOT_LOADED = object()


def get_supabase(request: Request) -> Client:
    return request.state.supabase


def get_current_user(request: Request) -> Optional[CurrentUser]:
    return getattr(request.state, "user", None)


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


def load_current_profile(request: Request) -> Optional[ProfileResponse]:
    """Profile of the signed-in user, looked up at most once per request."""
    profile = getattr(request.state, "profile", _NOT_LOADED)
    if profile is not _NOT_LOADED:
        return profile
    user = get_current_user(request)
    profile = None
    if user is not None:
        profile = ProfileService(request.state.supabase).get_current_profile(user.id)
    request.state.profile = profile
    return profile


def get_current_profile(request: Request) -> Optional[ProfileResponse]:
    return load_current_profile(request)
