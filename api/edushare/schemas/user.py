from datetime import datetime
from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Schema for creating an account."""
    username: str = Field(..., min_length=1, max_length=50, pattern=r'^[a-zA-Z0-9_.-]+$')
    email: str = Field(..., max_length=255, pattern=r'^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$')
    password: str = Field(..., min_length=6, max_length=128)
    role: str = Field(default='student', pattern=r'^(student|teacher)$')


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str


class UserBrief(BaseModel):
    """Brief user info for embedding in responses. Never carries email."""
    id: int
    username: str
    role: str

    class Config:
        from_attributes = True


class UserProfile(UserBrief):
    """Public profile."""
    weekly_score: int = 0
    lifetime_score: int = 0
    created_at: datetime
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False


class MeResponse(UserBrief):
    """The authenticated user's own record."""
    email: str
    weekly_score: int = 0
    lifetime_score: int = 0
    created_at: datetime

    class Config:
        from_attributes = True
