from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional
import re

_SPECIAL_CHARS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

class UserCreate(BaseModel):
    email: EmailStr
    username: str
    password: str

    @field_validator('username')
    def username_present(cls, v):
        v = v.strip()
        if len(v) < 3:
            raise ValueError('Username must be at least 3 characters')
        return v

    @field_validator('password')
    def password_strength(cls, v):
        if not (
            len(v) >= 8
            and re.search(r'[A-Z]', v)
            and re.search(r'[a-z]', v)
            and re.search(r'\d', v)
            and _SPECIAL_CHARS.search(v)
        ):
            raise ValueError('Password does not meet all requirements')
        return v

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class PasswordReset(BaseModel):
    email: EmailStr

class EmailVerification(BaseModel):
    oob_code: str

class UserResponse(BaseModel):
    uid: str
    username: str
    email: EmailStr

class TokenResponse(BaseModel):
    id_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"
    uid: str
    email: Optional[str] = None

class MessageResponse(BaseModel):
    success: bool = True
    message: str
