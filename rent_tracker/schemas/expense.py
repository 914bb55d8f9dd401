from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import List, Literal

class ExpenseCreate(BaseModel):
    group_id: int
    title: str
    total_amount: Decimal
    category: str | None = None
    paid_by: int | None = None

class SharePay(BaseModel):
    user_id: int | None = None

class ShareOut(BaseModel):
    user_id: int
    name: str
    email: str
    share_amount: float
    status: Literal["unpaid", "paid"]

class ExpenseOut(BaseModel):
    id: int
    group_id: int
    title: str
    total_amount: float
    category: str | None = None
    created_at: datetime | None = None
    paid_by: int | None = None
    paid_by_name: str | None = None
    shares: List[ShareOut] = []
