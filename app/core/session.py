"""
Session middleware: one Supabase client per request, the current user resolved from the
auth cookie, the request gate applied to page loads, refreshed cookies written back.
"""

import logging
from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from app.core import gate
from app.core.exceptions import AppError
from app.core.templating import render_error
from app.database import supabase_client
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)

PASSTHROUGH_PREFIXES = ("/static", "/health", "/ready")
PAGE_METHODS = ("GET", "HEAD")


async def _gate_redirect(request: Request, supabase, user):
    path = request.url.path
    has_session = user is not None
    has_profile = False
    if gate.needs_profile(path, has_session):
        profile = await run_in_threadpool(
            ProfileService(supabase).get_current_profile, user.id
        )
        request.state.profile = profile
        has_profile = profile is not None
    target = gate.decide_redirect(path, has_session, has_profile)
    if target is None:
        return None
    logger.debug(f"Gate redirect {path} -> {target}")
    return RedirectResponse(target, status_code=307)


async def session_middleware(request: Request, call_next):
    path = request.url.path
    if path.startswith(PASSTHROUGH_PREFIXES):
        return await call_next(request)

    storage = supabase_client.CookieStorage(request.cookies)
    supabase = supabase_client.create_request_client(storage)
    request.state.supabase = supabase
    request.state.user = None

    # Cookies written while resolving the session must reach the browser on every path
    try:
        user = await run_in_threadpool(AuthService(supabase).get_current_user)
        request.state.user = user
        response = None
        if request.method in PAGE_METHODS and not gate.is_exempt(path):
            response = await _gate_redirect(request, supabase, user)
        if response is None:
            response = await call_next(request)
    except AppError as e:
        response = await run_in_threadpool(render_error, request, e)
    storage.apply(response)
    return response
