import asyncio
from sqlmodel import select
from skillswap.db import init_db, get_session
from skillswap.models.category import Category
from skillswap.core.config import get_settings

categories = [
    ("Programming", "💻"),
    ("Design", "🎨"),
    ("Music", "🎵"),
    ("Languages", "🌍"),
    ("Sports", "⚽"),
    ("Cooking", "🍳"),
    ("Photography", "📷"),
    ("Marketing", "📈"),
]

async def add_categories():
    settings = get_settings()
    init_db(settings)

    async for session in get_session():
        for category_name, icon in categories:
            # Check if the category already exists
            result = await session.execute(select(Category).where(Category.name == category_name))
            existing_category = result.scalar_one_or_none()

            if existing_category is None:
                session.add(Category(name=category_name, icon=icon))
                print(f"Added category: {category_name}")
            else:
                print(f"Category already exists: {category_name}")

        await session.commit()

    print("All categories have been added or already exist.")

if __name__ == "__main__":
    asyncio.run(add_categories())
