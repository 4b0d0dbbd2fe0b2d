from typing import AsyncIterator
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from skillswap.models.user import *
from skillswap.models.profile import *
from skillswap.models.category import *
from skillswap.models.skill import *
from skillswap.models.swaps import *
from skillswap.models.rating import *
from skillswap.models.notification import *
from skillswap.utils.logger import get_logger

logger = get_logger(__name__)

connect_args = {}

engine = None


def init_db(settings):
    global engine

    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        future=True,
        connect_args=connect_args,
    )


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def recreate_table():
    try:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all)
            await conn.run_sync(SQLModel.metadata.create_all)
    except SQLAlchemyError:
        logger.exception("Database error while recreating tables")
        raise


async def get_session() -> AsyncIterator[AsyncSession]:
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


async def close_session():
    global engine
    if engine is None:
        raise Exception("DatabaseSessionManager is not initialized")
    await engine.dispose()
