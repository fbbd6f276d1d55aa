from fastapi import APIRouter, status, Depends, Path, Query, WebSocket
from typing import List, Optional
from pydantic import UUID4
from ....core.security import get_current_session
from ....schemas.skill import SkillDirection, UserSkillChange, UserSkills
from ....schemas.user import ProfileResponse, ProfileUpdate, ProfileWithSkills, UserSession
from ....services import profile_service, realtime, user_skills
from ..streaming import stream_updates

router = APIRouter(tags=["users"])

@router.get("/check-auth")
async def check_auth(session: UserSession = Depends(get_current_session)):
    """
    Check if the current user is authenticated.

    Returns the session the API will act on behalf of.
    """
    return {"authenticated": True, "session": session}

@router.get("/me", response_model=ProfileWithSkills)
async def get_current_user_profile(session: UserSession = Depends(get_current_session)):
    """Get the current user's profile and skills."""
    return await profile_service.get_profile_with_skills(session.user_id)

@router.patch("/me", response_model=ProfileResponse)
async def update_current_user_profile(
    user_update: ProfileUpdate,
    session: UserSession = Depends(get_current_session)
):
    """Update the current user's profile."""
    return await profile_service.update_profile(session.user_id, user_update)

@router.post("/me/skills", response_model=UserSkills, status_code=status.HTTP_201_CREATED)
async def add_skill(
    change: UserSkillChange,
    session: UserSession = Depends(get_current_session)
):
    """List a skill as offered or wanted. Adding an existing entry changes nothing."""
    await user_skills.add(session.user_id, change.skill_name, change.direction)
    return await user_skills.list_for(session.user_id)

@router.delete("/me/skills", response_model=UserSkills)
async def remove_skill(
    skill_name: str = Query(..., min_length=1),
    direction: SkillDirection = Query(...),
    session: UserSession = Depends(get_current_session)
):
    """Remove a skill entry; removing an entry that does not exist is not an error."""
    await user_skills.remove(session.user_id, skill_name, direction)
    return await user_skills.list_for(session.user_id)

@router.get("/", response_model=List[ProfileWithSkills])
async def browse_users(
    skill: Optional[str] = Query(None, description="Offered or wanted skill name contains"),
    location: Optional[str] = Query(None, description="Location contains"),
    q: Optional[str] = Query(None, description="Name, location or skill contains"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    session: UserSession = Depends(get_current_session)
):
    """Browse other public users with their skills."""
    users = await profile_service.browse(session.user_id, skill=skill, location=location, q=q)
    return users[skip:skip + limit]

@router.websocket("/ws")
async def profile_updates(websocket: WebSocket, token: str = Query(...)):
    """Push changes to the current user's own profile (rating, swap count, ban state)."""
    await stream_updates(websocket, token, realtime.subscribe_to_profile_updates, "Profile updates")

@router.get("/{user_id}", response_model=ProfileWithSkills)
async def get_user_by_id(user_id: UUID4 = Path(...)):
    """Get a user's public profile by ID."""
    return await profile_service.get_profile_with_skills(str(user_id))

@router.get("/{user_id}/skills", response_model=UserSkills)
async def get_user_skills(user_id: UUID4 = Path(...)):
    """Get the skills a user offers and wants."""
    await profile_service.get_profile(str(user_id))
    return await user_skills.list_for(str(user_id))
