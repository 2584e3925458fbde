from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, BaseModel, EmailStr, field_validator
from . import ORMModel, UserRole


class Address(BaseModel):
    first_name: str = Field(..., max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    street: str = Field(..., max_length=200)
    city: str = Field(..., max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zipcode: str = Field(..., pattern=r"^\d{5,6}$")
    country: str = Field("India", max_length=100)
    phone: str = Field(..., pattern=r"^\+?[\d\s\-()]{10,}$")


class UserBase(ORMModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, max_length=255)

    @field_validator('password')
    def validate_password(cls, v):
        if not any(c.islower() for c in v) or not any(c.isupper() for c in v) or not any(c.isdigit() for c in v):
            raise ValueError('Password must contain an uppercase letter, a lowercase letter and a digit')
        return v


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[Address] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserOut(UserBase):
    user_id: int = Field(..., ge=1)
    role: UserRole
    address: Optional[dict] = None
    created_at: datetime


class ChangePasswordRequest(BaseModel):
    """Change password within app (requires current password)"""
    current_password: str = Field(..., alias="currentPassword", description="Current password for verification")
    new_password: str = Field(..., alias="newPassword", min_length=8, max_length=100, description="New password")

    model_config = {"populate_by_name": True}
