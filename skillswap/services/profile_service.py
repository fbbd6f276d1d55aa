import logging
from datetime import datetime
from typing import Dict, List, Optional
from ..core.exceptions import NotFoundError, SkillSwapError
from ..core.supabase import execute_query, fetch_one
from ..schemas.skill import SkillDirection
from ..schemas.swap import SwapStatus
from ..schemas.user import ProfileUpdate
from . import skill_directory, user_skills

logger = logging.getLogger(__name__)


async def get_profile(user_id: str) -> Dict:
    profile = await fetch_one("profiles", {"id": str(user_id)})
    if not profile:
        raise NotFoundError("User not found")
    return profile


async def get_profile_with_skills(user_id: str) -> Dict:
    profile = await get_profile(user_id)
    skills = await user_skills.list_for(user_id)
    return {**profile, "skills": skills.model_dump()}


async def update_profile(user_id: str, update: ProfileUpdate) -> Dict:
    update_data = update.model_dump(exclude_unset=True)
    if not update_data:
        return await get_profile(user_id)

    update_data["updated_at"] = datetime.now().isoformat()
    updated = await execute_query(
        table="profiles",
        query_type="update",
        filters={"id": str(user_id)},
        data=update_data,
    )
    if not updated:
        raise NotFoundError("User not found")
    return updated[0]


async def browse(
    viewer_id: Optional[str] = None,
    skill: Optional[str] = None,
    location: Optional[str] = None,
    q: Optional[str] = None,
) -> List[Dict]:
    """
    Public, non-banned profiles with their skills.

    `skill` matches any offered or wanted skill name and `location` matches the
    profile location, both case-insensitive substrings. `q` is a free-text
    search that matches the name, the location or any skill. The filtering happens
    in memory over the fetched profiles.
    """
    profiles = await execute_query(
        table="profiles",
        query_type="select",
        filters={"is_public": True, "is_banned": False},
        order_by={"created_at": "desc"},
    )
    profiles = [p for p in profiles if p["id"] != str(viewer_id)]
    if not profiles:
        return []

    entries = await execute_query(
        table="user_skills",
        query_type="select",
        filters={"user_id": {"in": [p["id"] for p in profiles]}},
    )
    names = await skill_directory.names_for(entry["skill_id"] for entry in entries)

    skills_by_user = {p["id"]: {"offered": set(), "wanted": set()} for p in profiles}
    for entry in entries:
        name = names.get(entry["skill_id"])
        if name and entry["direction"] in (SkillDirection.OFFERED.value, SkillDirection.WANTED.value):
            skills_by_user[entry["user_id"]][entry["direction"]].add(name)

    results = []
    for profile in profiles:
        skills = skills_by_user[profile["id"]]
        if skill:
            needle = skill.lower()
            if not any(needle in name.lower() for name in skills["offered"] | skills["wanted"]):
                continue
        if location and location.lower() not in (profile.get("location") or "").lower():
            continue
        if q and q.strip():
            needle = q.strip().lower()
            haystack = [profile.get("name") or "", profile.get("location") or ""]
            haystack.extend(skills["offered"] | skills["wanted"])
            if not any(needle in text.lower() for text in haystack):
                continue
        results.append({
            **profile,
            "skills": {"offered": sorted(skills["offered"]), "wanted": sorted(skills["wanted"])},
        })

    return results


async def refresh_stats(user_id: str) -> None:
    """
    Recompute a profile's average rating and completed swap count.

    Runs after the fact of a rating or completion; a failure here is logged and
    does not undo the write that triggered it.
    """
    user_id = str(user_id)
    try:
        ratings = await execute_query(
            table="ratings",
            query_type="select",
            filters={"to_user_id": user_id},
            select="rating",
        )
        completed = await execute_query(
            table="swap_requests",
            query_type="select",
            filters={"status": SwapStatus.COMPLETED.value},
            or_filter=f"from_user_id.eq.{user_id},to_user_id.eq.{user_id}",
            select="id",
        )
        average = round(sum(r["rating"] for r in ratings) / len(ratings), 2) if ratings else 0
        await execute_query(
            table="profiles",
            query_type="update",
            filters={"id": user_id},
            data={"rating": average, "total_swaps": len(completed)},
        )
    except SkillSwapError as e:
        logger.warning(f"Failed to refresh profile stats for {user_id}: {e.detail}")
