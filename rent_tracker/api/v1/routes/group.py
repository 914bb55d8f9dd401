from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from rent_tracker.core.dependencies import get_current_user, get_db, check_group_membership
from rent_tracker.services.group_services import (
    add_member,
    create_group,
    get_group_details,
    list_groups,
    list_groups_for_user,
    list_members,
)
from rent_tracker.services.expense_services import get_group_summary, remove_member_cascade
from rent_tracker.schemas.group import (
    GroupCreate,
    GroupDetailsOut,
    GroupMemberOut,
    GroupOut,
    MemberAdd,
    MyGroupOut,
)

router = APIRouter()

@router.post("/", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
async def create_new_group(
    data: GroupCreate,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    group = await create_group(db, data.name, user.id)
    return {**group, "admin_name": user.name}

@router.get("/", response_model=list[GroupOut])
async def all_groups(db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await list_groups(db)

@router.get("/my", response_model=list[MyGroupOut])
async def my_groups(db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    return await list_groups_for_user(db, user.id)

@router.get("/{group_id}", response_model=GroupDetailsOut)
async def group_details(group_id: int, db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    await check_group_membership(db, group_id, user.id)
    details = await get_group_details(db, group_id)
    details["summary"] = await get_group_summary(db, group_id)
    return details

@router.get("/{group_id}/members", response_model=list[GroupMemberOut])
async def group_members(group_id: int, db: AsyncSession = Depends(get_db), user = Depends(get_current_user)):
    await check_group_membership(db, group_id, user.id)
    return await list_members(db, group_id)

@router.post("/{group_id}/members", status_code=status.HTTP_201_CREATED)
async def add_user_to_group(
    group_id: int,
    data: MemberAdd,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await add_member(db, group_id, data.user_id, requester_id=user.id, role=data.role)

@router.delete("/{group_id}/members/{user_id}")
async def remove_user_from_group(
    group_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    user = Depends(get_current_user)
):
    return await remove_member_cascade(db, group_id, user_id, requester_id=user.id)
