import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from ..core.config import get_settings
from ..core.exceptions import NotFoundError, StoreError, ValidationError
from ..core.supabase import execute_query, fetch_one

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Skill name must not be empty")
    return cleaned


async def id_for(name: str) -> str:
    """Look up a skill id by exact (case-sensitive) name."""
    skill = await fetch_one("skills", {"name": _clean_name(name)})
    if not skill:
        raise NotFoundError(f"Skill '{name}' not found")
    return skill["id"]


async def resolve_or_create(name: str, category: Optional[str] = None) -> str:
    """
    Return the id of the skill called `name`, creating it on first use.

    `skills.name` carries a unique constraint. When two callers create the same
    new name at once, the loser's insert fails with a unique violation and the
    winner's row is returned instead.
    """
    name = _clean_name(name)
    existing = await fetch_one("skills", {"name": name})
    if existing:
        return existing["id"]

    try:
        created = await execute_query(
            table="skills",
            query_type="insert",
            data={
                "name": name,
                "category": category or get_settings().default_skill_category,
                "created_at": datetime.now().isoformat(),
            },
        )
    except StoreError as e:
        if not e.is_unique_violation:
            raise
        logger.info(f"Skill '{name}' was created concurrently, using existing row")
        existing = await fetch_one("skills", {"name": name})
        if not existing:
            raise
        return existing["id"]

    if not created:
        raise StoreError(f"Failed to create skill '{name}'")

    logger.info(f"Created skill '{name}' ({created[0]['id']})")
    return created[0]["id"]


async def list_skills(category: Optional[str] = None) -> List[Dict]:
    filters = {"category": category} if category else None
    return await execute_query(
        table="skills",
        query_type="select",
        filters=filters,
        order_by={"name": "asc"},
    )


async def names_for(skill_ids: Iterable[str]) -> Dict[str, str]:
    """Map skill ids to names; unknown ids are left out."""
    ids = sorted({str(skill_id) for skill_id in skill_ids})
    if not ids:
        return {}
    rows = await execute_query(
        table="skills",
        query_type="select",
        filters={"id": {"in": ids}},
        select="id,name",
    )
    return {row["id"]: row["name"] for row in rows}
