"""
Domain error taxonomy.

Services raise these; action handlers recover them into an ActionResult so they never
reach the view layer as exceptions. Page routes let NotFound bubble up to the 404 handler.
"""

import logging
from typing import Optional

from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INVALID_INVITE_CODE_MARKER = "invalid_invite_code"


class AppError(Exception):
    """Base class for errors that carry a user-facing message."""

    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    default_message = "Invalid input"


class AuthenticationRequired(AppError):
    default_message = "Not authenticated"


class NotFound(AppError):
    default_message = "Not found"


class Conflict(AppError):
    default_message = "Already exists"


class DuplicateHandle(Conflict):
    default_message = "That team handle is already taken"


class DuplicateMembership(Conflict):
    default_message = "You are already a member of a team"


class DuplicateFollow(Conflict):
    default_message = "Already following this team"


class SelfReference(AppError):
    default_message = "Cannot follow your own team"


class InvalidInviteCode(AppError):
    default_message = "Invalid invite code"


class BackendError(AppError):
    default_message = "Backend request failed"


def translate_api_error(
    error: APIError,
    conflict: type = Conflict,
) -> AppError:
    """Map a PostgREST error onto the taxonomy.

    `conflict` selects the Conflict subclass for a unique violation when the constraint name
    does not identify it (profiles_pkey always means DuplicateMembership).
    """
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    details = getattr(error, "details", None) or ""
    if code == UNIQUE_VIOLATION:
        if "profiles_pkey" in message or "profiles_pkey" in details:
            return DuplicateMembership()
        if "follows_pkey" in message or "follows_pkey" in details:
            return DuplicateFollow()
        if "teams_handle_key" in message or "teams_invite_code_key" in message:
            return DuplicateHandle()
        return conflict()
    if code == FOREIGN_KEY_VIOLATION:
        return NotFound("Team not found")
    if INVALID_INVITE_CODE_MARKER in message:
        return InvalidInviteCode()
    logger.warning(f"Backend error {code}: {message}")
    return BackendError(message)
