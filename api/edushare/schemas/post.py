from datetime import datetime
from pydantic import BaseModel, Field

from edushare.schemas.user import UserBrief, UserProfile


class PostCreate(BaseModel):
    """Schema for creating a post."""
    content: str = Field(..., min_length=1, max_length=5000)


class PostResponse(BaseModel):
    """Post response with author info."""
    id: int
    author: UserBrief
    content: str
    likes_count: int
    comments_count: int
    created_at: datetime
    is_liked: bool = False

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    """Schema for creating a comment."""
    content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    """Comment response."""
    id: int
    post_id: int
    author: UserBrief
    content: str
    likes_count: int
    created_at: datetime
    is_liked: bool = False

    class Config:
        from_attributes = True


class LikeResponse(BaseModel):
    likes_count: int
    is_liked: bool


class UserPostsResponse(BaseModel):
    """Profile page payload: the user plus their posts."""
    user: UserProfile
    posts: list[PostResponse]

