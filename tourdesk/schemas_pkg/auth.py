from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = ""


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str


class UpdatePasswordRequest(BaseModel):
    email: EmailStr
    password: str


class UserOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    role: str = "customer"


class AuthResponse(BaseModel):
    success: bool = True
    user: UserOut
    message: Optional[str] = None
