from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from rent_tracker.db.session import Base

STATUS_UNPAID = "unpaid"
STATUS_PAID = "paid"

class ExpenseShare(Base):
    __tablename__ = "expense_shares"
    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_expense_share_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    share_amount = Column(Numeric(14, 4), nullable=False)
    status = Column(String, nullable=False, server_default=STATUS_UNPAID)

    expense = relationship("Expense", back_populates="shares")
    user = relationship("User")
