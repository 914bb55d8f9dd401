import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import aliased
from rent_tracker.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from rent_tracker.db.session import atomic
from rent_tracker.models.group import Group
from rent_tracker.models.group_member import GroupMember, ROLE_ADMIN, ROLE_MEMBER
from rent_tracker.models.user import User
from rent_tracker.services.user_queries import get_user_by_id

logger = logging.getLogger(__name__)


async def create_group(db: AsyncSession, name: str, admin_id: int):
    async with atomic(db):
        group = Group(name=name, admin_id=admin_id)
        db.add(group)
        await db.flush()

        db.add(GroupMember(group_id=group.id, user_id=admin_id, role=ROLE_ADMIN))

    logger.info("Group %s created by user %s", group.id, admin_id)
    return {"id": group.id, "name": group.name, "admin_id": group.admin_id}


async def get_group(db: AsyncSession, group_id: int):
    res = await db.execute(select(Group).where(Group.id == group_id))
    return res.scalar_one_or_none()


async def is_member(db: AsyncSession, group_id: int, user_id: int) -> bool:
    q = select(GroupMember.id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id
    )
    return (await db.scalar(q)) is not None


async def list_member_ids(db: AsyncSession, group_id: int) -> list[int]:
    q = (
        select(GroupMember.user_id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def add_member(db: AsyncSession, group_id: int, user_id: int, requester_id: int, role: str = ROLE_MEMBER):
    group = await get_group(db, group_id)
    if not group:
        raise NotFoundError("Group not found")

    if group.admin_id != requester_id:
        raise ForbiddenError("Only the group admin can add members")

    if not await get_user_by_id(db, user_id):
        raise NotFoundError("User not found")

    if await is_member(db, group_id, user_id):
        raise ValidationError("User is already a member of this group")

    async with atomic(db):
        member = GroupMember(group_id=group_id, user_id=user_id, role=role)
        db.add(member)

    logger.info("User %s added to group %s as %s", user_id, group_id, role)
    return {"message": "User added to group successfully."}


async def list_members(db: AsyncSession, group_id: int):
    q = (
        select(
            User.id.label("user_id"),
            User.name,
            User.email,
            User.phone,
            GroupMember.role,
            GroupMember.joined_at,
        )
        .join(User, User.id == GroupMember.user_id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.id)
    )
    res = await db.execute(q)
    return [dict(row._mapping) for row in res.all()]


async def list_groups(db: AsyncSession):
    admin = aliased(User)
    q = (
        select(Group.id, Group.name, Group.admin_id, admin.name.label("admin_name"))
        .join(admin, admin.id == Group.admin_id)
        .order_by(Group.id)
    )
    res = await db.execute(q)
    return [dict(row._mapping) for row in res.all()]


async def list_groups_for_user(db: AsyncSession, user_id: int):
    admin = aliased(User)
    q = (
        select(
            Group.id,
            Group.name,
            Group.admin_id,
            admin.name.label("admin_name"),
            GroupMember.role,
        )
        .join(GroupMember, GroupMember.group_id == Group.id)
        .join(admin, admin.id == Group.admin_id)
        .where(GroupMember.user_id == user_id)
        .order_by(Group.id)
    )
    res = await db.execute(q)
    return [dict(row._mapping) for row in res.all()]


async def get_group_details(db: AsyncSession, group_id: int):
    admin = aliased(User)
    q = (
        select(Group.id, Group.name, Group.admin_id, admin.name.label("admin_name"))
        .join(admin, admin.id == Group.admin_id)
        .where(Group.id == group_id)
    )
    row = (await db.execute(q)).first()

    if not row:
        raise NotFoundError("Group not found")

    details = dict(row._mapping)
    details["members"] = await list_members(db, group_id)
    return details
