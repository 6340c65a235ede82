import logging
from supabase import Client
from supabase_auth.errors import AuthError
from app.core.exceptions import BackendError
from app.modules.auth.schemas import SignInRequest, SignUpRequest, CurrentUser
from app.config import settings
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)


def to_current_user(user: Any) -> CurrentUser:
    metadata = getattr(user, "user_metadata", None) or {}
    return CurrentUser(
        id=user.id,
        email=getattr(user, "email", None),
        full_name=metadata.get("full_name") or metadata.get("name"),
    )


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self) -> Optional[CurrentUser]:
        """Validate the session held in the auth cookie; refreshes an expired access token.

        Any auth failure means "no session": the cookie is stale and the user signs in again.
        """
        try:
            session = self.supabase.auth.get_session()
            if session is None:
                return None
            user_response = self.supabase.auth.get_user(session.access_token)
        except AuthError as e:
            logger.debug(f"Discarding invalid session: {e.message}")
            return None
        if not user_response or not user_response.user:
            return None
        # Queries from here on run under the user's row-level policies
        self.supabase.postgrest.auth(session.access_token)
        return to_current_user(user_response.user)

    def sign_in_with_password(self, credentials: SignInRequest) -> CurrentUser:
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": credentials.email,
                "password": credentials.password
            })
        except AuthError as e:
            raise BackendError(e.message)
        if not auth_response.user or not auth_response.session:
            raise BackendError("Invalid login credentials")
        logger.info(f"User {auth_response.user.id} signed in")
        return to_current_user(auth_response.user)

    def sign_up(self, registration: SignUpRequest) -> Tuple[CurrentUser, bool]:
        """Register a user. The flag is False when email confirmation is pending (no session yet)."""
        user_metadata = {}
        if registration.full_name:
            user_metadata["full_name"] = registration.full_name
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": registration.email,
                "password": registration.password,
                "options": {
                    "data": user_metadata
                }
            })
        except AuthError as e:
            raise BackendError(e.message)
        if not auth_response.user:
            raise BackendError("Signup succeeded but no user ID was returned")
        logger.info(f"User {auth_response.user.id} signed up")
        return to_current_user(auth_response.user), auth_response.session is not None

    def oauth_url(self, redirect_to: str) -> str:
        """Provider authorization URL; the PKCE verifier is stored in the auth cookie storage"""
        try:
            oauth_response = self.supabase.auth.sign_in_with_oauth({
                "provider": settings.oauth_provider,
                "options": {
                    "redirect_to": redirect_to
                }
            })
        except AuthError as e:
            raise BackendError(e.message)
        return oauth_response.url

    def exchange_code_for_session(self, auth_code: str, redirect_to: str) -> CurrentUser:
        try:
            auth_response = self.supabase.auth.exchange_code_for_session({
                "auth_code": auth_code,
                "redirect_to": redirect_to
            })
        except AuthError as e:
            raise BackendError(e.message)
        if not auth_response.user:
            raise BackendError("Could not complete sign in")
        logger.info(f"User {auth_response.user.id} signed in with {settings.oauth_provider}")
        return to_current_user(auth_response.user)

    def sign_out(self) -> None:
        try:
            self.supabase.auth.sign_out()
        except AuthError as e:
            # The local session is cleared even when revoking it upstream fails
            logger.warning(f"Sign out failed upstream: {e.message}")
