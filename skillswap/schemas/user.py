from pydantic import BaseModel, Field, UUID4, AliasChoices
from typing import Optional, List
from datetime import datetime
from .skill import UserSkills

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    profile_photo: Optional[str] = None
    availability: Optional[List[str]] = None
    is_public: Optional[bool] = None

class ProfileResponse(BaseModel):
    """
    Canonical profile shape returned by the API.

    Older rows written by the web client may carry `profilePhoto`; it is
    accepted here and nowhere else.
    """
    id: UUID4
    name: str
    location: Optional[str] = None
    profile_photo: Optional[str] = Field(
        None, validation_alias=AliasChoices("profile_photo", "profilePhoto")
    )
    availability: List[str] = []
    is_public: bool = True
    is_banned: bool = False
    rating: float = 0
    total_swaps: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ProfileWithSkills(ProfileResponse):
    skills: UserSkills = UserSkills()

class UserSession(BaseModel):
    """The authenticated principal a request acts on behalf of."""
    user_id: str
    name: str = ""
    is_admin: bool = False
    is_banned: bool = False
