from fastapi import APIRouter, Depends, Form, Request
from supabase import Client
from app.config import settings
from app.core.dependencies import get_current_user, get_profile_service, get_supabase
from app.core.templating import form_response, render
from app.modules.auth.schemas import CurrentUser
from app.modules.posts import actions
from app.modules.posts.service import PostService
from app.modules.profiles.service import ProfileService
from typing import Optional

router = APIRouter(tags=["posts"])


def get_post_service(supabase: Client = Depends(get_supabase)) -> PostService:
    return PostService(supabase)


@router.get("/")
def feed(request: Request, service: PostService = Depends(get_post_service)):
    """Latest posts from all teams"""
    posts = service.list_all_posts(settings.feed_limit)
    return render(request, "feed.html", {"posts": posts})


@router.get("/compose")
def compose_page(request: Request):
    return render(request, "compose.html", {"content": ""})


@router.post("/compose")
def compose(
    request: Request,
    content: str = Form(""),
    user: Optional[CurrentUser] = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
    profiles: ProfileService = Depends(get_profile_service)
):
    """Publish a post as the caller's team"""
    result = actions.create_post(service, profiles, user, content)
    return form_response(request, result, "compose.html", {"content": content})
