from edushare.schemas.user import (
    RegisterRequest, LoginRequest, TokenResponse, UserBrief, UserProfile, MeResponse,
)
from edushare.schemas.post import (
    PostCreate, PostResponse, CommentCreate, CommentResponse, LikeResponse, UserPostsResponse,
)
from edushare.schemas.leaderboard import LeaderboardEntry, LeaderboardResponse
from edushare.schemas.resource import ResourceResponse, ResourcePage
from edushare.schemas.assistant import AssistantRequest, AssistantResponse

__all__ = [
    'RegisterRequest',
    'LoginRequest',
    'TokenResponse',
    'UserBrief',
    'UserProfile',
    'MeResponse',
    'PostCreate',
    'PostResponse',
    'CommentCreate',
    'CommentResponse',
    'LikeResponse',
    'UserPostsResponse',
    'LeaderboardEntry',
    'LeaderboardResponse',
    'ResourceResponse',
    'ResourcePage',
    'AssistantRequest',
    'AssistantResponse',
]
