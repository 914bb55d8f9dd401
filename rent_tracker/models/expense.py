from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from rent_tracker.db.session import Base

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    paid_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    shares = relationship("ExpenseShare", back_populates="expense")
