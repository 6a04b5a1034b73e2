from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime


class AwardRequest(BaseModel):
    roadmap_id: int = Field(..., alias="roadmapId")
    recipient_name: Optional[str] = Field(None, alias="recipientName", max_length=255)
    roadmap_name: Optional[str] = Field(None, alias="roadmapName", max_length=255)

    model_config = {"populate_by_name": True}


class AwardResponse(BaseModel):
    id: int
    user_id: int
    roadmap_id: int
    recipient_name: Optional[str]
    roadmap_name: Optional[str]
    completion_date: Optional[date]
    url: Optional[str]
    issued_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class AwardIssued(BaseModel):
    message: str
    created: bool
    award: AwardResponse


class AdminStats(BaseModel):
    total_users: int
    total_roadmaps: int
    total_modules: int
    total_tasks: int
    badges_issued: int
    certificates_issued: int


class AdminAwardResponse(AwardResponse):
    username: str
    email: str
    roadmap_title: str
