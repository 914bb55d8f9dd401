import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
from sqlalchemy.orm import aliased
from rent_tracker.core.exceptions import (
    ForbiddenError,
    NoMembersError,
    NotFoundError,
    ValidationError,
)
from rent_tracker.core.utils import MAX_TOTAL, equal_share, qround, to_decimal
from rent_tracker.db.session import atomic
from rent_tracker.models.expense import Expense
from rent_tracker.models.expense_share import ExpenseShare, STATUS_PAID, STATUS_UNPAID
from rent_tracker.models.group_member import GroupMember
from rent_tracker.models.user import User
from rent_tracker.services.group_services import get_group, is_member, list_member_ids

logger = logging.getLogger(__name__)


def _parse_amount(total_amount) -> Decimal:
    if total_amount is None or total_amount == "":
        raise ValidationError("Missing required fields.")
    try:
        amount = to_decimal(total_amount)
    except (InvalidOperation, ValueError):
        raise ValidationError("total_amount must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("total_amount must be greater than zero")
    if amount > MAX_TOTAL:
        raise ValidationError("total_amount is too large")

    # stored to the cent, and shares are split from the stored value
    cents = qround(amount)
    if cents != amount:
        raise ValidationError("total_amount cannot have more than 2 decimal places")
    return cents


async def create_expense(
    db: AsyncSession,
    group_id: int,
    title: str,
    total_amount,
    category: str | None = None,
    paid_by: int | None = None,
):
    """
    Record an expense and split it evenly across the group's current members.

    The expense and every share are written in one transaction. The member
    list is read once, so later membership changes never touch these shares.
    """
    if not group_id or not title or not title.strip():
        raise ValidationError("Missing required fields.")
    amount = _parse_amount(total_amount)

    async with atomic(db):
        if not await get_group(db, group_id):
            raise NotFoundError("Group not found")

        if paid_by is not None and not await is_member(db, group_id, paid_by):
            raise ValidationError("Payer is not a member of the group")

        expense = Expense(
            group_id=group_id,
            title=title.strip(),
            total_amount=amount,
            category=category,
            paid_by=paid_by,
        )
        db.add(expense)
        await db.flush()  # generates expense.id

        member_ids = await list_member_ids(db, group_id)

        if not member_ids:
            raise NoMembersError()

        share = equal_share(amount, len(member_ids))

        db.add_all([
            ExpenseShare(
                expense_id=expense.id,
                user_id=user_id,
                share_amount=share,
                status=STATUS_UNPAID,
            )
            for user_id in member_ids
        ])

    logger.info(
        "Expense %s added to group %s: %s split %s ways",
        expense.id, group_id, amount, len(member_ids)
    )
    return await get_expense(db, expense.id)


async def _shares_by_expense(db: AsyncSession, expense_ids: list[int]) -> dict[int, list[dict]]:
    if not expense_ids:
        return {}

    q = (
        select(
            ExpenseShare.expense_id,
            ExpenseShare.user_id,
            User.name,
            User.email,
            ExpenseShare.share_amount,
            ExpenseShare.status,
        )
        .join(User, User.id == ExpenseShare.user_id)
        .where(ExpenseShare.expense_id.in_(expense_ids))
        .order_by(ExpenseShare.id)
    )
    res = await db.execute(q)

    shares: dict[int, list[dict]] = {}
    for row in res.all():
        shares.setdefault(row.expense_id, []).append({
            "user_id": row.user_id,
            "name": row.name,
            "email": row.email,
            "share_amount": float(row.share_amount),
            "status": row.status,
        })
    return shares


async def get_expense_shares(db: AsyncSession, expense_id: int) -> list[dict]:
    await get_expense_group_id(db, expense_id)

    shares = await _shares_by_expense(db, [expense_id])
    return shares.get(expense_id, [])


def _expense_query():
    payer = aliased(User)
    return (
        select(
            Expense.id,
            Expense.group_id,
            Expense.title,
            Expense.total_amount,
            Expense.category,
            Expense.created_at,
            Expense.paid_by,
            payer.name.label("paid_by_name"),
        )
        .outerjoin(payer, payer.id == Expense.paid_by)
    )


async def _load_expenses(db: AsyncSession, q) -> list[dict]:
    rows = (await db.execute(q)).all()
    shares = await _shares_by_expense(db, [row.id for row in rows])

    return [
        {
            "id": row.id,
            "group_id": row.group_id,
            "title": row.title,
            "total_amount": float(row.total_amount),
            "category": row.category,
            "created_at": row.created_at,
            "paid_by": row.paid_by,
            "paid_by_name": row.paid_by_name,
            "shares": shares.get(row.id, []),
        }
        for row in rows
    ]


async def list_expenses(db: AsyncSession, group_id: int) -> list[dict]:
    q = (
        _expense_query()
        .where(Expense.group_id == group_id)
        .order_by(Expense.created_at.desc(), Expense.id.desc())
    )
    return await _load_expenses(db, q)


async def get_expense(db: AsyncSession, expense_id: int) -> dict:
    expenses = await _load_expenses(db, _expense_query().where(Expense.id == expense_id))

    if not expenses:
        raise NotFoundError("Expense not found")

    return expenses[0]


async def get_expense_group_id(db: AsyncSession, expense_id: int) -> int:
    group_id = await db.scalar(select(Expense.group_id).where(Expense.id == expense_id))

    if group_id is None:
        raise NotFoundError("Expense not found")

    return group_id


async def mark_share_paid(db: AsyncSession, expense_id: int, user_id: int):
    # Only ever writes "paid"; there is no way back to "unpaid".
    async with atomic(db):
        res = await db.execute(
            update(ExpenseShare)
            .where(
                ExpenseShare.expense_id == expense_id,
                ExpenseShare.user_id == user_id,
            )
            .values(status=STATUS_PAID)
            .execution_options(synchronize_session=False)
        )

        if res.rowcount == 0:
            raise NotFoundError("Expense share not found.")

    logger.info("Share of user %s on expense %s marked paid", user_id, expense_id)
    return {"message": "Marked as paid."}


async def delete_expense(db: AsyncSession, expense_id: int):
    async with atomic(db):
        await db.execute(
            delete(ExpenseShare)
            .where(ExpenseShare.expense_id == expense_id)
            .execution_options(synchronize_session=False)
        )

        res = await db.execute(
            delete(Expense)
            .where(Expense.id == expense_id)
            .execution_options(synchronize_session=False)
        )

        if res.rowcount == 0:
            raise NotFoundError("Expense not found")

    logger.info("Expense %s deleted with its shares", expense_id)
    return {"message": "Expense and related shares deleted successfully"}


async def remove_member_cascade(db: AsyncSession, group_id: int, user_id: int, requester_id: int):
    """
    Remove a member from a group along with their ledger footprint.

    Only the group's admin may do this. In a single transaction it deletes
    the expenses the member paid for (and all of their shares), the member's
    remaining shares on other expenses of the group, and the membership row.
    """
    async with atomic(db):
        group = await get_group(db, group_id)

        if not group:
            raise NotFoundError("Group not found")

        if group.admin_id != requester_id:
            raise ForbiddenError("Only the group admin can remove members")

        if user_id == group.admin_id:
            raise ValidationError("The group admin cannot be removed")

        paid_q = select(Expense.id).where(
            Expense.group_id == group_id,
            Expense.paid_by == user_id
        )
        paid_ids = list((await db.execute(paid_q)).scalars().all())

        if paid_ids:
            await db.execute(
                delete(ExpenseShare)
                .where(ExpenseShare.expense_id.in_(paid_ids))
                .execution_options(synchronize_session=False)
            )
            await db.execute(
                delete(Expense)
                .where(Expense.id.in_(paid_ids))
                .execution_options(synchronize_session=False)
            )

        group_expenses = select(Expense.id).where(Expense.group_id == group_id)
        await db.execute(
            delete(ExpenseShare)
            .where(
                ExpenseShare.user_id == user_id,
                ExpenseShare.expense_id.in_(group_expenses),
            )
            .execution_options(synchronize_session=False)
        )

        res = await db.execute(
            delete(GroupMember)
            .where(
                GroupMember.group_id == group_id,
                GroupMember.user_id == user_id,
            )
            .execution_options(synchronize_session=False)
        )

        if res.rowcount == 0:
            raise NotFoundError("Member not found in this group")

    logger.info(
        "User %s removed from group %s by admin, %s paid expense(s) dropped",
        user_id, group_id, len(paid_ids)
    )
    return {"message": "Member and their expenses removed from the group"}


async def get_group_summary(db: AsyncSession, group_id: int):
    totals_q = select(
        func.count(Expense.id),
        func.coalesce(func.sum(Expense.total_amount), 0),
    ).where(Expense.group_id == group_id)
    count, total = (await db.execute(totals_q)).one()

    outstanding_q = (
        select(
            User.id.label("user_id"),
            User.name,
            func.coalesce(func.sum(ExpenseShare.share_amount), 0).label("outstanding"),
        )
        .join(ExpenseShare, ExpenseShare.user_id == User.id)
        .join(Expense, Expense.id == ExpenseShare.expense_id)
        .where(
            Expense.group_id == group_id,
            ExpenseShare.status == STATUS_UNPAID,
        )
        .group_by(User.id, User.name)
        .order_by(User.id)
    )
    rows = (await db.execute(outstanding_q)).all()

    return {
        "expense_count": count,
        "total_spent": float(qround(to_decimal(total))),
        "outstanding": [
            {
                "user_id": row.user_id,
                "name": row.name,
                "outstanding": float(qround(to_decimal(row.outstanding))),
            }
            for row in rows
        ],
    }
