import re
from pydantic import BaseModel, Field, field_validator, model_validator
from uuid import UUID

USERNAME_PATTERN = re.compile(r"^\w+$", re.ASCII)


class RegisterRequest(BaseModel):
    """Self-service registration form"""

    username: str
    email: str = Field(..., max_length=255)
    password: str
    confirm_password: str

    @field_validator("username", mode="before")
    @classmethod
    def check_username(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Username cannot be empty")
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Username cannot exceed 50 characters")
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Email cannot be empty")
        if "@" not in v or "." not in v:
            raise ValueError("Invalid email format")
        if len(v) > 255:
            raise ValueError("Email cannot exceed 255 characters")
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class TokenClaims(BaseModel):
    """Claims carried by a signed login token"""

    sub: UUID
    username: str
    iat: int
    exp: int


class AuthenticatedUser(BaseModel):
    user_id: UUID
    username: str
