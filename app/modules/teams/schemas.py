from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class TeamSummary(BaseModel):
    name: str
    handle: str


class TeamResponse(BaseModel):
    id: str
    name: str
    handle: str
    invite_code: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TeamStats(BaseModel):
    followers: int = 0
    following: int = 0
    members: int = 0


class TeamCreate(BaseModel):
    team_name: str
    handle: Optional[str] = None
    full_name: Optional[str] = None


class TeamJoin(BaseModel):
    invite_code: str
    team_id: Optional[str] = None
    full_name: Optional[str] = None
