from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal

class GroupCreate(BaseModel):
    name: str = Field(min_length=1)

class GroupOut(BaseModel):
    id: int
    name: str
    admin_id: int
    admin_name: str | None = None

    class Config:
        from_attributes = True

class MyGroupOut(GroupOut):
    role: str

class MemberAdd(BaseModel):
    user_id: int
    role: Literal["admin", "member"] = "member"

class GroupMemberOut(BaseModel):
    user_id: int
    name: str
    email: str
    phone: str | None = None
    role: str
    joined_at: datetime | None = None

class MemberBalance(BaseModel):
    user_id: int
    name: str
    outstanding: float

class GroupSummary(BaseModel):
    expense_count: int
    total_spent: float
    outstanding: List[MemberBalance]

class GroupDetailsOut(GroupOut):
    members: List[GroupMemberOut]
    summary: GroupSummary
