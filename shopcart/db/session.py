from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from shopcart.core.config import settings
from shopcart.db.base import Base

engine = create_async_engine(settings.DATABASE_URL, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Create the cart storage table if migrations have not been run."""
    from shopcart.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
