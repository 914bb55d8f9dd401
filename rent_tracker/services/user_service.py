import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from rent_tracker.models.user import User
from rent_tracker.schemas.user import UserCreate, UserRegister
from rent_tracker.core.security import hash_password, verify_password, issue_credential, SessionEpoch
from rent_tracker.core.exceptions import AuthError, NotFoundError, StorageError, ValidationError
from rent_tracker.db.session import atomic
from rent_tracker.services.user_queries import get_user_by_email, get_user_by_id, normalize_email

logger = logging.getLogger(__name__)


async def create_user(db: AsyncSession, data: UserCreate, password: str | None = None):
    existing = await get_user_by_email(db, data.email)
    if existing:
        raise ValidationError("User with this email already exists.")

    user = User(
        email=normalize_email(data.email),
        name=data.name,
        phone=data.phone,
        password_hash=hash_password(password) if password else None
    )

    try:
        async with atomic(db):
            db.add(user)
    except StorageError as exc:
        # a concurrent registration won the unique email index
        if isinstance(exc.__cause__, IntegrityError):
            raise ValidationError("User with this email already exists.") from exc.__cause__
        raise

    await db.refresh(user)
    return user


async def register_user_service(db: AsyncSession, data: UserRegister, epoch: SessionEpoch):
    user = await create_user(db, data, password=data.password)
    token = issue_credential(user.id, user.email, epoch)

    logger.info("User %s registered", user.id)
    return user, token


async def login_user_service(
    db: AsyncSession,
    email: str,
    password: str,
    epoch: SessionEpoch,
):
    user = await get_user_by_email(db, email)

    if not user:
        raise AuthError("Invalid email or password.")

    if not user.password_hash:
        raise AuthError("Please set a password for your account.")

    if not verify_password(password, user.password_hash):
        raise AuthError("Invalid email or password.")

    token = issue_credential(user.id, user.email, epoch)

    logger.info("User %s logged in", user.id)
    return user, token


async def change_password_service(
    db: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
):
    user = await get_user_by_id(db, user_id)

    if not user:
        raise NotFoundError("User not found.")

    # legacy accounts have nothing to verify against
    if user.password_hash and not verify_password(current_password, user.password_hash):
        raise AuthError("Current password is incorrect.")

    async with atomic(db):
        user.password_hash = hash_password(new_password)

    logger.info("User %s changed password", user_id)
    return {"message": "Password updated successfully"}
