from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


# Interviewer rows go out with their column names, like the frontend's
# CustomInterviewer type.
class CustomInterviewerResponse(BaseModel):
    id: str
    user_id: str
    name: str
    title: str
    description: Optional[str]
    specialties: list[str]
    experience: str
    voice_id: str
    avatar_url: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class InterviewerUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    specialties: Optional[str] = None  # JSON string array
    experience: Optional[str] = Field(default=None, min_length=1)


class DefaultInterviewerResponse(BaseModel):
    id: str
    name: str
    avatar: str
    title: str
    description: str
    specialties: list[str]
    experience: str
    is_default: bool = Field(default=True, serialization_alias="isDefault")
