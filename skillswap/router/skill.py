from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ..core.exceptions import Forbidden, NotFound, ValidationError
from ..db import get_session
from ..models.category import Category
from ..models.skill import (
    PaginatedSkillResponse,
    Skill,
    SkillCreate,
    SkillLevel,
    SkillRead,
    SkillType,
    SkillUpdate,
)
from ..models.user import User
from ..services import cascade
from ..utils.auth import get_current_user
from ..utils.logger import get_logger
from ..utils.pagination import paginate, total_pages

router = APIRouter()
logger = get_logger(__name__)

SKILLS_PER_PAGE = 12


def with_relations(statement):
    return statement.options(
        selectinload(Skill.category),
        selectinload(Skill.user).selectinload(User.profile),
    )


async def _load_skill(session: AsyncSession, skill_id: int) -> Skill:
    result = await session.execute(
        with_relations(select(Skill)).where(Skill.id == skill_id).execution_options(populate_existing=True)
    )
    skill = result.scalar_one_or_none()
    if not skill:
        raise NotFound("Skill not found")
    return skill


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def _check_category(session: AsyncSession, category_id: Optional[int]):
    if category_id is not None and not await session.get(Category, category_id):
        raise ValidationError("category_id", "The selected category id is invalid.")


@router.get("", response_model=PaginatedSkillResponse)
async def list_skills(
    session: AsyncSession = Depends(get_session),
    type: Optional[SkillType] = Query(None, description="offer or request"),
    category_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Search skill name and description"),
    level: Optional[SkillLevel] = Query(None),
    page: int = Query(1, ge=1, description="Page number"),
    items_per_page: int = Query(SKILLS_PER_PAGE, ge=1, le=100, description="Items per page"),
):
    statement = with_relations(select(Skill))
    if type:
        statement = statement.where(Skill.type == type.value)
    if category_id is not None:
        statement = statement.where(Skill.category_id == category_id)
    if search:
        pattern = f"%{escape_like(search)}%"
        statement = statement.where(or_(
            Skill.skill_name.ilike(pattern, escape="\\"),
            Skill.description.ilike(pattern, escape="\\"),
        ))
    if level:
        statement = statement.where(Skill.level == level.value)
    statement = statement.order_by(Skill.created_at.desc(), Skill.id.desc())

    skills, total_items = await paginate(session, statement, page, items_per_page)
    return PaginatedSkillResponse(
        items=[skill.to_read(with_user=True) for skill in skills],
        total_items=total_items,
        page=page,
        items_per_page=items_per_page,
        total_pages=total_pages(total_items, items_per_page),
    )


@router.post("", response_model=SkillRead, status_code=status.HTTP_201_CREATED)
async def create_skill(
    skill: SkillCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    await _check_category(session, skill.category_id)

    db_skill = Skill(
        user_id=current_user.id,
        skill_name=skill.skill_name,
        description=skill.description,
        type=skill.type.value,
        level=skill.level.value,
        category_id=skill.category_id,
    )
    session.add(db_skill)
    await session.commit()
    await session.refresh(db_skill)
    logger.info("User %s added skill %s (%s)", current_user.id, db_skill.id, db_skill.type)

    db_skill = await _load_skill(session, db_skill.id)
    return db_skill.to_read(with_user=True)


# Get all skills listed by the current user
@router.get("/mine", response_model=List[SkillRead])
async def get_my_skills(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    result = await session.execute(
        select(Skill)
        .options(selectinload(Skill.category))
        .where(Skill.user_id == current_user.id)
        .order_by(Skill.created_at.desc(), Skill.id.desc())
    )
    return [skill.to_read() for skill in result.scalars().all()]


@router.get("/match", response_model=List[SkillRead])
async def match_skills(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    wanted = await session.execute(
        select(Skill.skill_name)
        .where(Skill.user_id == current_user.id)
        .where(Skill.type == SkillType.REQUEST.value)
    )
    wanted = wanted.scalars().all()
    if not wanted:
        return []

    result = await session.execute(
        with_relations(select(Skill))
        .where(Skill.skill_name.in_(wanted))
        .where(Skill.type == SkillType.OFFER.value)
        .where(Skill.user_id != current_user.id)
        .order_by(Skill.id)
    )
    return [skill.to_read(with_user=True) for skill in result.scalars().all()]


@router.get("/{skill_id}", response_model=SkillRead)
async def get_skill(skill_id: int, session: AsyncSession = Depends(get_session)):
    skill = await _load_skill(session, skill_id)
    return skill.to_read(with_user=True)


@router.put("/{skill_id}", response_model=SkillRead)
async def update_skill(
    skill_id: int,
    skill_update: SkillUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    db_skill = await session.get(Skill, skill_id)
    if not db_skill:
        raise NotFound("Skill not found")
    if db_skill.user_id != current_user.id:
        raise Forbidden("You can only edit your own skills")

    changes = skill_update.model_dump(exclude_unset=True)
    if "category_id" in changes:
        await _check_category(session, changes["category_id"])
    for field, value in changes.items():
        if value is None and field in ("skill_name", "type", "level"):
            continue
        setattr(db_skill, field, value.value if isinstance(value, (SkillType, SkillLevel)) else value)
    db_skill.updated_at = datetime.utcnow()

    await session.commit()
    db_skill = await _load_skill(session, skill_id)
    return db_skill.to_read(with_user=True)


@router.delete("/{skill_id}")
async def delete_skill(
    skill_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    db_skill = await session.get(Skill, skill_id)
    if not db_skill:
        raise NotFound("Skill not found")
    if db_skill.user_id != current_user.id and not current_user.is_admin:
        raise Forbidden("You can only delete your own skills")

    await cascade.delete_skill(session, db_skill)
    return {"message": "Skill deleted"}
