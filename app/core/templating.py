import logging
from datetime import datetime, timezone
from pathlib import Path
from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from app.config import settings
from app.core.actions import ActionResult
from app.core.dependencies import get_current_user, load_current_profile
from app.core.exceptions import AppError, NotFound
from app.core.validation import MAX_POST_LENGTH
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def time_ago(value: datetime, now: Optional[datetime] = None) -> str:
    """Compact relative age: "just now", "5m", "3h", "2d"."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    return f"{hours // 24}d"


def initials(name: str) -> str:
    return "".join(word[0] for word in (name or "").split() if word)[:2].upper()


templates.env.filters["time_ago"] = time_ago
templates.env.filters["initials"] = initials


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    """Render a page. Pages are never cached so a mutation is visible on the next load."""
    current_user = get_current_user(request)
    current_profile = None
    if current_user is not None:
        try:
            current_profile = load_current_profile(request)
        except AppError as e:
            logger.warning(f"Navbar profile lookup failed: {e.message}")
    page_context = {
        "app_name": settings.app_name,
        "current_user": current_user,
        "current_profile": current_profile,
        "max_post_length": MAX_POST_LENGTH,
    }
    page_context.update(context or {})
    response = templates.TemplateResponse(request, name, page_context, status_code=status_code)
    response.headers["Cache-Control"] = "no-store"
    return response


def form_response(
    request: Request,
    result: ActionResult,
    name: str,
    context: Optional[Dict[str, Any]] = None,
):
    """Follow a successful form action with a 303, or re-render the form with its error."""
    if result.redirect_to:
        return RedirectResponse(result.redirect_to, status_code=303)
    page_context = dict(context or {})
    page_context["error"] = result.error
    return render(request, name, page_context, status_code=400)


def site_url(request: Request) -> str:
    return (settings.site_url or str(request.base_url)).rstrip("/")


def render_error(request: Request, exc: AppError):
    """Error page for a domain error that escaped its handler."""
    if isinstance(exc, NotFound):
        return render(request, "not_found.html", {"message": exc.message}, status_code=404)
    logger.warning(f"Request failed: {exc.message}")
    return render(request, "error.html", {"message": exc.message}, status_code=502)
