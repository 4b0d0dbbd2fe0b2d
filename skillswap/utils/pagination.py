from typing import Any, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(session: AsyncSession, statement, page: int, items_per_page: int) -> Tuple[List[Any], int]:
    """Run ``statement`` for one page and count every row it would return."""
    count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
    total_items = await session.execute(count_statement)
    total_items = total_items.scalar_one()

    offset = (page - 1) * items_per_page
    result = await session.execute(statement.offset(offset).limit(items_per_page))
    return result.scalars().unique().all(), total_items


def total_pages(total_items: int, items_per_page: int) -> int:
    return (total_items + items_per_page - 1) // items_per_page
