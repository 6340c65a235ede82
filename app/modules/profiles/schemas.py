from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from app.modules.teams.schemas import TeamSummary


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    team_id: str
    full_name: Optional[str] = None
    created_at: datetime
    team: Optional[TeamSummary] = Field(default=None, alias="teams")
