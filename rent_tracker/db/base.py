# Imports every model so Base.metadata is complete for create_all and alembic.
from rent_tracker.db.session import Base  # noqa: F401
from rent_tracker.models.user import User  # noqa: F401
from rent_tracker.models.group import Group  # noqa: F401
from rent_tracker.models.group_member import GroupMember  # noqa: F401
from rent_tracker.models.expense import Expense  # noqa: F401
from rent_tracker.models.expense_share import ExpenseShare  # noqa: F401
