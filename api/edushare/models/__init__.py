from edushare.models.user import User, Follow, UserRole
from edushare.models.post import Post, Comment, PostLike, CommentLike
from edushare.models.resource import Resource
from edushare.models.system import SystemState

__all__ = [
    'User',
    'Follow',
    'UserRole',
    'Post',
    'Comment',
    'PostLike',
    'CommentLike',
    'Resource',
    'SystemState',
]
