import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from skillswap.models.rating import Rating
from skillswap.models.skill import Skill
from skillswap.models.swaps import SwapRequest

from conftest import auth_headers, create_skill, make_swap


@pytest.mark.asyncio
async def test_create_skill(async_session: AsyncSession, users, category):
    user1, _, _ = users
    skill = Skill(user_id=user1.id, skill_name="Piano", type="offer", level="advanced", category_id=category.id)
    async_session.add(skill)
    await async_session.commit()
    await async_session.refresh(skill)

    assert skill.id is not None
    assert skill.skill_info.skill_name == "Piano"
    assert skill.to_read().category is None
    assert skill.to_read().user_id == user1.id


@pytest.mark.asyncio
async def test_skill_endpoints(client, users, category):
    user1, user2, _ = users

    response = await client.post(
        "/api/skills",
        json={"skill_name": "Piano", "description": "Classical piano", "type": "offer", "category_id": category.id},
        headers=auth_headers(user1),
    )
    assert response.status_code == 201
    skill = response.json()
    assert skill["level"] == "intermediate"
    assert skill["category"]["name"] == "Music"
    assert skill["user"]["name"] == "John Doe"

    response = await client.post(
        "/api/skills", json={"skill_name": "Piano", "type": "swap"}, headers=auth_headers(user1)
    )
    assert response.status_code == 422

    response = await client.post(
        "/api/skills", json={"skill_name": "Piano", "type": "offer", "category_id": 999}, headers=auth_headers(user1)
    )
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["body", "category_id"]

    response = await client.put(
        f"/api/skills/{skill['id']}", json={"level": "advanced"}, headers=auth_headers(user2)
    )
    assert response.status_code == 403

    response = await client.put(
        f"/api/skills/{skill['id']}", json={"level": "advanced", "description": None}, headers=auth_headers(user1)
    )
    assert response.status_code == 200
    assert response.json()["level"] == "advanced"
    assert response.json()["description"] is None
    assert response.json()["skill_name"] == "Piano"

    response = await client.get(f"/api/skills/{skill['id']}")
    assert response.status_code == 200

    response = await client.get("/api/skills/mine", headers=auth_headers(user1))
    assert [s["id"] for s in response.json()] == [skill["id"]]

    response = await client.delete(f"/api/skills/{skill['id']}", headers=auth_headers(user2))
    assert response.status_code == 403

    response = await client.delete(f"/api/skills/{skill['id']}", headers=auth_headers(user1))
    assert response.status_code == 200

    response = await client.get(f"/api/skills/{skill['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_skills_filters(client, async_session: AsyncSession, users, category):
    user1, user2, user3 = users
    await create_skill(async_session, user1, "Guitar", category=category)
    await create_skill(async_session, user1, "Python", type="request", level="beginner")
    await create_skill(async_session, user2, "Python", level="advanced")
    await create_skill(async_session, user3, "Spanish")

    response = await client.get("/api/skills")
    assert response.json()["total_items"] == 4

    response = await client.get("/api/skills", params={"type": "offer"})
    assert response.json()["total_items"] == 3

    response = await client.get("/api/skills", params={"search": "pyth"})
    assert response.json()["total_items"] == 2

    response = await client.get("/api/skills", params={"search": "pyth", "type": "offer"})
    assert [s["user_id"] for s in response.json()["items"]] == [user2.id]

    response = await client.get("/api/skills", params={"category_id": category.id})
    assert [s["skill_name"] for s in response.json()["items"]] == ["Guitar"]

    response = await client.get("/api/skills", params={"level": "beginner"})
    assert response.json()["total_items"] == 1

    response = await client.get("/api/skills", params={"items_per_page": 3, "page": 2})
    body = response.json()
    assert body["total_pages"] == 2
    assert len(body["items"]) == 1

    for wildcard in ("%", "_"):
        response = await client.get("/api/skills", params={"search": wildcard})
        assert response.json()["total_items"] == 0

    await create_skill(async_session, user3, "100% Vegan_Cooking")
    for literal in ("%", "_", "0% v"):
        response = await client.get("/api/skills", params={"search": literal})
        assert [s["skill_name"] for s in response.json()["items"]] == ["100% Vegan_Cooking"]


@pytest.mark.asyncio
async def test_match_skills(client, async_session: AsyncSession, users):
    user1, user2, user3 = users
    await create_skill(async_session, user1, "Python", type="request")
    await create_skill(async_session, user1, "Python")
    python = await create_skill(async_session, user2, "Python")
    await create_skill(async_session, user3, "Python", type="request")
    await create_skill(async_session, user3, "Spanish")

    response = await client.get("/api/skills/match", headers=auth_headers(user1))
    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [python.id]

    response = await client.get("/api/skills/match", headers=auth_headers(user2))
    assert response.json() == []


@pytest.mark.asyncio
async def test_deleting_skill_removes_its_swaps(client, async_session: AsyncSession, users, skills):
    user1, user2, _ = users
    guitar, python = skills
    swap = await make_swap(async_session, user1, user2, guitar, python, status="completed")
    async_session.add(Rating(swap_id=swap.id, rater_id=user1.id, rated_id=user2.id, rating=5))
    await async_session.commit()

    response = await client.delete(f"/api/skills/{python.id}", headers=auth_headers(user2))
    assert response.status_code == 200

    swaps = await async_session.execute(select(SwapRequest))
    assert swaps.scalars().all() == []
    ratings = await async_session.execute(select(Rating))
    assert ratings.scalars().all() == []
    remaining = await async_session.execute(select(Skill.id))
    assert remaining.scalars().all() == [guitar.id]
