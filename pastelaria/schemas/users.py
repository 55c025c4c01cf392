from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

from pastelaria.models.users import Role


class UserBase(BaseModel):
    username: str
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    role: Role = Role.EMPLOYEE


class UserCreate(UserBase):
    password: str


class UserRead(UserBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
