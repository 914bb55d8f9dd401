import logging
from datetime import datetime, timezone

from sqlalchemy import select, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from rent_tracker.core.security import SessionEpoch
from rent_tracker.db.session import engine
from rent_tracker.models.user import User
from rent_tracker.models.group import Group
from rent_tracker.models.expense import Expense
from rent_tracker.models.expense_share import ExpenseShare, STATUS_PAID, STATUS_UNPAID

logger = logging.getLogger(__name__)


async def check_db_service():
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health probe failed: %s", e)
        return {"db": False, "error": str(e)}

    return {"db": True, "message": "Database is connected"}


async def system_health(epoch: SessionEpoch):
    uptime = datetime.now(timezone.utc) - epoch.started_at
    return {
        "status": "ok",
        "started_at": epoch.started_at.isoformat(),
        "uptime_seconds": int(uptime.total_seconds()),
    }


async def system_metrics(db: AsyncSession):
    counts_q = select(
        select(func.count(User.id)).scalar_subquery().label("users"),
        select(func.count(Group.id)).scalar_subquery().label("groups"),
        select(func.count(Expense.id)).scalar_subquery().label("expenses"),
    )
    counts = (await db.execute(counts_q)).one()

    shares_q = (
        select(
            ExpenseShare.status,
            func.count(ExpenseShare.id),
            func.coalesce(func.sum(ExpenseShare.share_amount), 0),
        )
        .group_by(ExpenseShare.status)
    )
    by_status = {status: (n, total) for status, n, total in (await db.execute(shares_q)).all()}

    unpaid_count, unpaid_total = by_status.get(STATUS_UNPAID, (0, 0))
    paid_count, _ = by_status.get(STATUS_PAID, (0, 0))

    return {
        "users": counts.users,
        "groups": counts.groups,
        "expenses": counts.expenses,
        "shares_paid": paid_count,
        "shares_unpaid": unpaid_count,
        "outstanding": round(float(unpaid_total), 2),
    }
