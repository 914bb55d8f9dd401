from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from rent_tracker.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_id(db: AsyncSession, user_id: int):
    return await db.scalar(select(User).where(User.id == user_id))


async def get_user_by_email(db: AsyncSession, email: str):
    # emails are matched case-insensitively, including rows stored before normalization
    q = select(User).where(func.lower(User.email) == normalize_email(email))
    return await db.scalar(q)


async def get_all_users(db: AsyncSession):
    res = await db.scalars(select(User).order_by(User.name, User.id))
    return res.all()
