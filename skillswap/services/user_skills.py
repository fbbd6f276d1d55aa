import logging
from datetime import datetime
from typing import Set
from ..core.exceptions import NotFoundError, ValidationError
from ..core.supabase import execute_query, fetch_one
from ..schemas.skill import SkillDirection, UserSkills
from . import skill_directory

logger = logging.getLogger(__name__)


def _direction(direction) -> SkillDirection:
    try:
        return SkillDirection(direction)
    except ValueError:
        raise ValidationError(f"Unknown skill direction: {direction}")


async def add(user_id: str, skill_name: str, direction) -> str:
    """
    List a skill on a user's profile. Adding an entry that already exists is a
    no-op; the same skill may be both offered and wanted.
    """
    direction = _direction(direction)
    skill_id = await skill_directory.resolve_or_create(skill_name)

    await execute_query(
        table="user_skills",
        query_type="upsert",
        data={
            "user_id": str(user_id),
            "skill_id": skill_id,
            "direction": direction.value,
            "created_at": datetime.now().isoformat(),
        },
        on_conflict="user_id,skill_id,direction",
    )
    logger.info(f"User {user_id} lists '{skill_name}' as {direction.value}")
    return skill_id


async def remove(user_id: str, skill_name: str, direction) -> bool:
    """Remove an entry; returns False when there was nothing to remove."""
    direction = _direction(direction)
    try:
        skill_id = await skill_directory.id_for(skill_name)
    except NotFoundError:
        return False

    filters = {"user_id": str(user_id), "skill_id": skill_id, "direction": direction.value}
    if not await fetch_one("user_skills", filters):
        return False

    await execute_query(table="user_skills", query_type="delete", filters=filters)
    logger.info(f"User {user_id} removed '{skill_name}' from {direction.value}")
    return True


async def list_for(user_id: str) -> UserSkills:
    entries = await execute_query(
        table="user_skills",
        query_type="select",
        filters={"user_id": str(user_id)},
    )
    names = await skill_directory.names_for(entry["skill_id"] for entry in entries)

    offered, wanted = set(), set()
    for entry in entries:
        name = names.get(entry["skill_id"])
        if not name:
            continue
        if entry["direction"] == SkillDirection.OFFERED.value:
            offered.add(name)
        elif entry["direction"] == SkillDirection.WANTED.value:
            wanted.add(name)

    return UserSkills(offered=sorted(offered), wanted=sorted(wanted))


async def offered_skill_ids(user_id: str) -> Set[str]:
    entries = await execute_query(
        table="user_skills",
        query_type="select",
        filters={"user_id": str(user_id), "direction": SkillDirection.OFFERED.value},
        select="skill_id",
    )
    return {entry["skill_id"] for entry in entries}
