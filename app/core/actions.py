"""
Action result envelope and the boundary that turns domain errors into it.
"""

import functools
import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel

from app.core.exceptions import AppError, AuthenticationRequired

logger = logging.getLogger(__name__)


class ActionResult(BaseModel):
    success: bool = False
    error: Optional[str] = None
    redirect_to: Optional[str] = None
    data: Optional[dict] = None

    @classmethod
    def redirect(cls, path: str) -> "ActionResult":
        return cls(success=True, redirect_to=path)

    @classmethod
    def ok(cls, **data: Any) -> "ActionResult":
        return cls(success=True, data=data or None)

    @classmethod
    def fail(cls, message: str) -> "ActionResult":
        return cls(success=False, error=message)

    def as_payload(self) -> dict:
        """JSON body for in-place actions: {"error": ...} or {"success": true, ...}."""
        if self.error is not None:
            return {"error": self.error}
        payload = {"success": True}
        if self.data:
            payload.update(self.data)
        return payload


def action(func: Callable[..., ActionResult]) -> Callable[..., ActionResult]:
    """Recover AppError raised inside an action handler as ActionResult(error=...)."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> ActionResult:
        try:
            return func(*args, **kwargs)
        except AppError as e:
            logger.info(f"{func.__name__} rejected: {e.message}")
            return ActionResult.fail(e.message)

    return wrapper


def require_user(user, message: Optional[str] = None):
    if user is None:
        raise AuthenticationRequired(message)
    return user


def safe_next_path(next_path: Optional[str], default: str = "/") -> str:
    """Only same-site relative paths are accepted as post-login destinations."""
    if not next_path or not next_path.startswith("/") or next_path[1:2] in ("/", "\\"):
        return default
    return next_path
