from pydantic import BaseModel, Field, UUID4
from typing import Optional, List
from datetime import datetime
from enum import Enum

class SkillDirection(str, Enum):
    OFFERED = "offered"
    WANTED = "wanted"

class SkillCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)

class SkillResponse(BaseModel):
    id: UUID4
    name: str
    category: str
    created_at: Optional[datetime] = None

class SkillLookupResponse(BaseModel):
    id: UUID4
    name: str

class UserSkillChange(BaseModel):
    skill_name: str = Field(..., min_length=1, max_length=100)
    direction: SkillDirection

class UserSkills(BaseModel):
    offered: List[str] = []
    wanted: List[str] = []
