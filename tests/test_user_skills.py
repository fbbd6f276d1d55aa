from __future__ import annotations

import pytest

from skillswap.core.exceptions import ValidationError
from skillswap.schemas.skill import SkillDirection
from skillswap.services import user_skills


@pytest.mark.asyncio
async def test_add_creates_skill_on_first_use(store, make_user) -> None:
    alice = make_user("Alice")

    skill_id = await user_skills.add(alice.user_id, "Photography", SkillDirection.OFFERED)

    assert store.rows("skills", name="Photography")[0]["id"] == skill_id
    assert (await user_skills.list_for(alice.user_id)).offered == ["Photography"]


@pytest.mark.asyncio
async def test_add_is_idempotent(store, make_user) -> None:
    alice = make_user("Alice")

    await user_skills.add(alice.user_id, "Guitar", "offered")
    await user_skills.add(alice.user_id, "Guitar", "offered")

    assert len(store.rows("user_skills", user_id=alice.user_id)) == 1


@pytest.mark.asyncio
async def test_same_skill_can_be_offered_and_wanted(store, make_user) -> None:
    alice = make_user("Alice")

    await user_skills.add(alice.user_id, "Chess", "offered")
    await user_skills.add(alice.user_id, "Chess", "wanted")

    skills = await user_skills.list_for(alice.user_id)
    assert skills.offered == ["Chess"]
    assert skills.wanted == ["Chess"]
    assert len(store.rows("skills", name="Chess")) == 1


@pytest.mark.asyncio
async def test_remove_only_touches_one_direction(store, make_user) -> None:
    alice = make_user("Alice", offered=("Chess",), wanted=("Chess",))

    assert await user_skills.remove(alice.user_id, "Chess", "wanted") is True

    skills = await user_skills.list_for(alice.user_id)
    assert skills.offered == ["Chess"]
    assert skills.wanted == []


@pytest.mark.asyncio
async def test_remove_missing_entry_is_a_no_op(store, make_user) -> None:
    alice = make_user("Alice", offered=("Chess",))

    assert await user_skills.remove(alice.user_id, "Chess", "wanted") is False
    assert await user_skills.remove(alice.user_id, "Never Heard Of It", "offered") is False
    assert store.writes() == []


@pytest.mark.asyncio
async def test_unknown_direction_is_rejected(store, make_user) -> None:
    alice = make_user("Alice")
    with pytest.raises(ValidationError):
        await user_skills.add(alice.user_id, "Chess", "teaching")
    assert store.writes() == []


@pytest.mark.asyncio
async def test_list_for_sorts_names_and_offered_ids_ignore_wanted(store, make_user) -> None:
    alice = make_user("Alice", offered=("Violin", "Baking"), wanted=("French",))

    skills = await user_skills.list_for(alice.user_id)
    assert skills.offered == ["Baking", "Violin"]
    assert skills.wanted == ["French"]

    offered_ids = await user_skills.offered_skill_ids(alice.user_id)
    assert offered_ids == {
        store.rows("skills", name="Violin")[0]["id"],
        store.rows("skills", name="Baking")[0]["id"],
    }
