from fastapi import APIRouter, status, Depends, Query
from typing import List, Optional
from ....core.security import get_current_session
from ....schemas.skill import SkillCreate, SkillLookupResponse, SkillResponse
from ....schemas.user import UserSession
from ....services import skill_directory

router = APIRouter(tags=["skills"])

@router.get("/", response_model=List[SkillResponse])
async def get_skills(category: Optional[str] = None):
    """List known skills, optionally within one category."""
    return await skill_directory.list_skills(category)

@router.get("/lookup", response_model=SkillLookupResponse)
async def lookup_skill(name: str = Query(..., min_length=1)):
    """Resolve an exact (case-sensitive) skill name to its id."""
    skill_id = await skill_directory.id_for(name)
    return {"id": skill_id, "name": name.strip()}

@router.post("/", response_model=SkillLookupResponse, status_code=status.HTTP_201_CREATED)
async def create_skill(
    skill: SkillCreate,
    session: UserSession = Depends(get_current_session)
):
    """Return the skill with this name, creating it if it does not exist yet."""
    skill_id = await skill_directory.resolve_or_create(skill.name, skill.category)
    return {"id": skill_id, "name": skill.name.strip()}
