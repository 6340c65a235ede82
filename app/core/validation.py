"""Input normalization shared by the action handlers and services."""

import re
from typing import Optional

from app.core.exceptions import ValidationError

MAX_POST_LENGTH = 500
HANDLE_PATTERN = re.compile(r"^[a-z0-9_-]+$")

_HANDLE_INVALID_CHARS = re.compile(r"[^a-z0-9_-]")
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Derive a handle from a team name: "Vizio Engineering" -> "vizio-engineering"."""
    return _SLUG_SEPARATORS.sub("-", (text or "").lower()).strip("-")


def sanitize_handle(handle: str) -> str:
    """Lowercase and replace anything outside [a-z0-9_-] with '-'. Idempotent."""
    return _HANDLE_INVALID_CHARS.sub("-", (handle or "").lower())


def derive_handle(team_name: str, handle: Optional[str]) -> str:
    raw = handle.strip() if handle and handle.strip() else slugify(team_name)
    sanitized = sanitize_handle(raw)
    if not sanitized or not HANDLE_PATTERN.match(sanitized):
        raise ValidationError("Team handle is required")
    return sanitized


def clean_team_name(team_name: Optional[str]) -> str:
    name = (team_name or "").strip()
    if not name:
        raise ValidationError("Team name is required")
    return name


def clean_post_content(content: Optional[str]) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationError("Post content cannot be empty")
    if len(text) > MAX_POST_LENGTH:
        raise ValidationError(f"Post content cannot exceed {MAX_POST_LENGTH} characters")
    return text


def clean_invite_code(invite_code: Optional[str]) -> str:
    code = (invite_code or "").strip()
    if not code:
        raise ValidationError("Invite code is required")
    return code


def clean_optional(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None
