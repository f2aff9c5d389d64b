from typing import Literal
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

Role = Literal["admin", "stock_operator", "user"]

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=72, description="Plain password (will be hashed). Minimum 8 characters.")
    role: Role = "user"

class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    created_at: datetime

    class Config:
        from_attributes = True

class UserLogin(BaseModel):
    email: str | None = None
    password: str | None = None
    role: str | None = None

class RoleUpdate(BaseModel):
    role: Role | None = None

class AdminBootstrap(BaseModel):
    secret: str
    name: str
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
