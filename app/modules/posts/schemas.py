from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from app.modules.teams.schemas import TeamSummary


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    team_id: str
    author_id: Optional[str] = None
    content: str
    created_at: datetime
    team: Optional[TeamSummary] = Field(default=None, alias="teams")
