from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..db import get_session
from ..models.category import Category, CategoryInfo

router = APIRouter()


@router.get("", response_model=List[CategoryInfo])
async def get_categories(session: AsyncSession = Depends(get_session)):
    result = await session.execute(select(Category).order_by(Category.name))
    return result.scalars().all()
