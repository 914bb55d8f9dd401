from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from rent_tracker.core.dependencies import get_current_user, get_db, check_group_membership
from rent_tracker.schemas.expense import ExpenseCreate, ExpenseOut, SharePay
from rent_tracker.services.expense_services import (
    create_expense,
    delete_expense,
    get_expense_group_id,
    list_expenses,
    mark_share_paid,
)

router = APIRouter()

@router.post("/", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
async def add_expense(data: ExpenseCreate, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    await check_group_membership(db, data.group_id, current_user.id)
    return await create_expense(
        db,
        group_id=data.group_id,
        title=data.title,
        total_amount=data.total_amount,
        category=data.category,
        paid_by=data.paid_by,
    )

@router.get("/group/{group_id}", response_model=list[ExpenseOut])
async def group_expenses(group_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    await check_group_membership(db, group_id, current_user.id)
    return await list_expenses(db, group_id)

@router.patch("/{expense_id}/pay")
async def pay_share(
    expense_id: int,
    data: SharePay,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user),
):
    group_id = await get_expense_group_id(db, expense_id)
    await check_group_membership(db, group_id, current_user.id)
    user_id = data.user_id if data.user_id is not None else current_user.id
    return await mark_share_paid(db, expense_id, user_id)

@router.delete("/{expense_id}")
async def del_expense(expense_id: int, db: AsyncSession = Depends(get_db), current_user = Depends(get_current_user)):
    group_id = await get_expense_group_id(db, expense_id)
    await check_group_membership(db, group_id, current_user.id)
    return await delete_expense(db, expense_id)
