# smartwash/schemas/user.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserRole(str, Enum):
    ADMIN = "Admin"
    ATTENDANT = "Attendant"


class UserProfile(BaseModel):
    uid: str
    name: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    name: str = Field(min_length=2)
    email: str = Field(pattern=EMAIL_PATTERN)
    role: UserRole = UserRole.ATTENDANT
    password: str = Field(min_length=8)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    role: Optional[UserRole] = None
    password: Optional[str] = Field(default=None, min_length=8)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginOut(BaseModel):
    token: str
    profile: UserProfile
    landing: str     # /admin | /dashboard
