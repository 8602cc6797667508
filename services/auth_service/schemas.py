from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class AdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["admin", "superadmin"] = "admin"


class AdminUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[Literal["admin", "superadmin"]] = None
    is_active: Optional[bool] = None


class AdminLogin(BaseModel):
    # Looked up as stored, not validated
    email: str
    password: str = Field(min_length=6)


class AdminResponse(BaseModel):
    id: int
    email: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    admin: AdminResponse
