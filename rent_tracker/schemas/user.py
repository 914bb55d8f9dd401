from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1)

class UserCreate(UserBase):
    phone: str = Field(min_length=1)

class UserRegister(UserCreate):
    password: str = Field(min_length=1)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=1)

class UserOut(UserBase):
    id: int
    phone: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class AuthOut(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserOut
