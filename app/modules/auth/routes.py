from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from app.config import settings
from app.core.dependencies import get_auth_service, get_profile_service
from app.core.gate import AUTH_CALLBACK_PATH
from app.core.limiter import limiter
from app.core.templating import form_response, render, site_url
from app.modules.auth import actions
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService
from typing import Optional

router = APIRouter(tags=["auth"])

NOTICES = {
    "check-email": "Check your email to confirm your account, then sign in.",
}


def callback_url(request: Request) -> str:
    return f"{site_url(request)}{AUTH_CALLBACK_PATH}"


@router.get("/login")
def login_page(request: Request, notice: Optional[str] = None, error: Optional[str] = None):
    return render(request, "login.html", {
        "notice": NOTICES.get(notice or ""),
        "error": error,
        "oauth_provider": settings.oauth_provider,
    })


@router.post("/login")
@limiter.limit(settings.auth_rate_limit)
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Sign in with email and password"""
    result = actions.sign_in(auth, profiles, email, password)
    return form_response(request, result, "login.html", {
        "email": email,
        "oauth_provider": settings.oauth_provider,
    })


@router.post("/login/oauth")
def login_oauth(request: Request, auth: AuthService = Depends(get_auth_service)):
    """Start the OAuth redirect to the configured provider"""
    result = actions.start_oauth(auth, callback_url(request))
    return form_response(request, result, "login.html", {
        "oauth_provider": settings.oauth_provider,
    })


@router.get(AUTH_CALLBACK_PATH)
def auth_callback(
    request: Request,
    code: Optional[str] = None,
    next: Optional[str] = None,
    auth: AuthService = Depends(get_auth_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Finish the OAuth redirect by exchanging the code for a session"""
    result = actions.complete_oauth(auth, profiles, code, callback_url(request), next)
    if result.error:
        return RedirectResponse(f"/login?{urlencode({'error': result.error})}", status_code=303)
    return RedirectResponse(result.redirect_to, status_code=303)


@router.get("/signup")
def signup_page(request: Request):
    return render(request, "signup.html")


@router.post("/signup")
@limiter.limit(settings.auth_rate_limit)
def signup(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    full_name: str = Form(""),
    auth: AuthService = Depends(get_auth_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Register with email and password; team setup happens on onboarding"""
    result = actions.sign_up(auth, profiles, email, password, full_name)
    return form_response(request, result, "signup.html", {
        "email": email,
        "full_name": full_name,
    })


@router.post("/logout")
def logout(auth: AuthService = Depends(get_auth_service)):
    result = actions.sign_out(auth)
    return RedirectResponse(result.redirect_to or "/", status_code=303)
