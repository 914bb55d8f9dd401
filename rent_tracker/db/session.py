import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from rent_tracker.core.config import settings
from rent_tracker.core.exceptions import StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True
)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@asynccontextmanager
async def atomic(db: AsyncSession):
    """
    One transaction around a block of statements.

    Commits when the block exits cleanly and rolls back on any exception, so
    a multi-row mutation is either fully applied or not at all. Driver errors
    surface as StorageError.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Transaction rolled back after a storage failure")
        raise StorageError() from exc
    except BaseException:
        await db.rollback()
        raise
