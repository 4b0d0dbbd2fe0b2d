import asyncio
import random
from sqlmodel import select
from skillswap.db import init_db, get_session
from skillswap.models.category import Category
from skillswap.models.profile import Profile
from skillswap.models.skill import Skill, SkillLevel, SkillType
from skillswap.models.user import User, UserRole
from skillswap.core.config import get_settings
from skillswap.utils.auth import get_password_hash

DEFAULT_PASSWORD = "password"

admin_account = {"name": "Admin", "email": "admin@skillswap.com", "bio": "Platform Administrator", "location": "Global"}

demo_users = [
    {"name": "John Doe", "email": "john@example.com", "offer": ["Guitar", "Piano"], "request": ["Python", "React"]},
    {"name": "Sarah Ahmed", "email": "sarah@example.com", "offer": ["Photoshop", "UI/UX"], "request": ["Guitar", "Spanish"]},
    {"name": "Ali Hassan", "email": "ali@example.com", "offer": ["Python", "Django"], "request": ["Photography", "Piano"]},
    {"name": "Emma Wilson", "email": "emma@example.com", "offer": ["Spanish", "French"], "request": ["Photoshop", "Cooking"]},
    {"name": "Carlos Mendez", "email": "carlos@example.com", "offer": ["Photography"], "request": ["React", "Django"]},
    {"name": "Aisha Noor", "email": "aisha@example.com", "offer": ["React", "Vue.js"], "request": ["French", "UI/UX"]},
]

async def get_or_create_user(session, name, email, role=UserRole.USER, bio=None, location=None):
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"User already exists: {email}")
        return user, False

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(DEFAULT_PASSWORD),
        role=role.value,
        is_verified=True,
    )
    session.add(user)
    await session.flush()
    session.add(Profile(user_id=user.id, bio=bio, location=location))
    print(f"Added user: {email}")
    return user, True

async def add_skills():
    settings = get_settings()
    init_db(settings)

    async for session in get_session():
        result = await session.execute(select(Category))
        categories = result.scalars().all()
        if not categories:
            print("No categories found, run add_categories.py first.")
            return

        await get_or_create_user(session, role=UserRole.ADMIN, **admin_account)

        for demo in demo_users:
            user, created = await get_or_create_user(
                session, demo["name"], demo["email"],
                bio="Passionate about learning and sharing skills.", location="Demo City",
            )
            if not created:
                continue
            for skill_type, level, names in (
                (SkillType.OFFER, SkillLevel.INTERMEDIATE, demo["offer"]),
                (SkillType.REQUEST, SkillLevel.BEGINNER, demo["request"]),
            ):
                for skill_name in names:
                    session.add(Skill(
                        user_id=user.id,
                        skill_name=skill_name,
                        type=skill_type.value,
                        level=level.value,
                        category_id=random.choice(categories).id,
                    ))

        await session.commit()

    print(f"Demo data ready. Every account uses the password '{DEFAULT_PASSWORD}'.")

if __name__ == "__main__":
    asyncio.run(add_skills())
