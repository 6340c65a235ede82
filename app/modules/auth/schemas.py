from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional


class SignInRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


class SignUpRequest(SignInRequest):
    full_name: Optional[str] = None


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
