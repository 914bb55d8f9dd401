from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from rent_tracker.db.session import async_session
from rent_tracker.core.exceptions import ForbiddenError, InvalidCredentialError, NotFoundError
from rent_tracker.core.security import SessionEpoch, get_bearer_token, validate_credential
from rent_tracker.services.user_queries import get_user_by_id
from rent_tracker.services.group_services import get_group, is_member

async def get_db():
    async with async_session() as session:
        yield session

def get_session_epoch(request: Request) -> SessionEpoch:
    return request.app.state.session_epoch

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    epoch: SessionEpoch = Depends(get_session_epoch),
):
    token = get_bearer_token(request)
    payload = validate_credential(token, epoch)

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidCredentialError()

    user = await get_user_by_id(db, user_id)

    if user is None:
        raise InvalidCredentialError("User not found")

    return user

async def check_group_membership(db: AsyncSession, group_id: int, user_id: int):
    group = await get_group(db, group_id)

    if not group:
        raise NotFoundError("Group does not exist")

    if not await is_member(db, group_id, user_id):
        raise ForbiddenError("You are not a member of this group")

    return group
