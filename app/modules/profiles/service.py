from supabase import Client
from postgrest.exceptions import APIError
from app.core.exceptions import translate_api_error
from app.modules.profiles.schemas import ProfileResponse
from typing import Optional


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Profile of the given user, or None when they have not onboarded yet"""
        try:
            result = self.supabase.table("profiles")\
                .select("*, teams(name, handle)")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return ProfileResponse(**result.data[0])
        except APIError as e:
            raise translate_api_error(e)
