from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import select, desc, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edushare.db.database import get_db
from edushare.models.user import User
from edushare.models.post import Post, Comment, PostLike, CommentLike
from edushare.routes.deps import get_current_user
from edushare.schemas.post import (
    PostCreate, PostResponse, CommentCreate, CommentResponse, LikeResponse,
)
from edushare.schemas.user import UserBrief
from edushare.services.ledger_service import ScoreLedger, ScoreAction

router = APIRouter()


def _user_brief(user: User) -> UserBrief:
    return UserBrief(id=user.id, username=user.username, role=user.role)


def build_post_response(
    post: Post, author: User | None = None, is_liked: bool = False,
) -> PostResponse:
    """Build PostResponse from Post model (post.author must be loaded if no author given)."""
    return PostResponse(
        id=post.id,
        author=_user_brief(author or post.author),
        content=post.content,
        likes_count=post.likes_count,
        comments_count=post.comments_count,
        created_at=post.created_at,
        is_liked=is_liked,
    )


def _comment_response(c: Comment, author: User, is_liked: bool = False) -> CommentResponse:
    return CommentResponse(
        id=c.id,
        post_id=c.post_id,
        author=_user_brief(author),
        content=c.content,
        likes_count=c.likes_count,
        created_at=c.created_at,
        is_liked=is_liked,
    )


async def check_post_liked(db: AsyncSession, post_ids: list[int], user_id: int) -> set[int]:
    """Return set of post IDs that the user has liked."""
    if not post_ids or not user_id:
        return set()
    result = await db.execute(
        select(PostLike.post_id)
        .where(PostLike.user_id == user_id)
        .where(PostLike.post_id.in_(post_ids))
    )
    return set(result.scalars().all())


async def _check_comment_liked(db: AsyncSession, comment_ids: list[int], user_id: int) -> set[int]:
    """Return set of comment IDs that the user has liked."""
    if not comment_ids or not user_id:
        return set()
    result = await db.execute(
        select(CommentLike.comment_id)
        .where(CommentLike.user_id == user_id)
        .where(CommentLike.comment_id.in_(comment_ids))
    )
    return set(result.scalars().all())


async def _get_comment(db: AsyncSession, post_id: int, comment_id: int) -> Comment:
    comment = await db.get(Comment, comment_id)
    if not comment or comment.post_id != post_id:
        raise HTTPException(status_code=404, detail='Comment not found')
    return comment


# ── Posts ────────────────────────────────────────────────────────────────────

@router.post('', response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new post. Credits the author +5."""
    post = Post(author_id=user.id, content=post_data.content)
    db.add(post)
    await db.commit()

    response = build_post_response(post, author=user)
    await ScoreLedger(db).apply(user.id, ScoreAction.CREATE_POST)
    return response


@router.get('', response_model=list[PostResponse])
async def get_posts(
    user_id: int | None = Query(None, description='Current user for is_liked'),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """All posts, newest first."""
    result = await db.execute(
        select(Post)
        .options(selectinload(Post.author))
        .order_by(desc(Post.created_at), desc(Post.id))
        .limit(limit)
        .offset(offset)
    )
    posts = list(result.scalars().all())

    liked_ids = await check_post_liked(db, [p.id for p in posts], user_id or 0)
    return [build_post_response(p, is_liked=p.id in liked_ids) for p in posts]


@router.get('/{post_id}', response_model=PostResponse)
async def get_post(
    post_id: int,
    user_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Get a single post by ID."""
    result = await db.execute(
        select(Post).options(selectinload(Post.author)).where(Post.id == post_id)
    )
    post = result.scalar_one_or_none()
    if not post:
        raise HTTPException(status_code=404, detail='Post not found')

    liked_ids = await check_post_liked(db, [post.id], user_id or 0)
    return build_post_response(post, is_liked=post.id in liked_ids)


# ── Post Likes ───────────────────────────────────────────────────────────────

@router.post('/{post_id}/like', response_model=LikeResponse)
async def like_post(
    post_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Like a post. Credits the post author +1. Double-like is rejected."""
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail='Post not found')

    existing = await db.execute(
        select(PostLike).where(
            and_(PostLike.post_id == post_id, PostLike.user_id == user.id)
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail='Post already liked')

    db.add(PostLike(post_id=post_id, user_id=user.id))
    post.likes_count += 1
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent like from the same user
        await db.rollback()
        raise HTTPException(status_code=400, detail='Post already liked')

    response = LikeResponse(likes_count=post.likes_count, is_liked=True)
    await ScoreLedger(db).apply(post.author_id, ScoreAction.POST_LIKED)
    return response


@router.delete('/{post_id}/like', response_model=LikeResponse)
async def unlike_post(
    post_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Unlike a post. Debits the post author -1. Rejected if not liked."""
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail='Post not found')

    result = await db.execute(
        select(PostLike).where(
            and_(PostLike.post_id == post_id, PostLike.user_id == user.id)
        )
    )
    like = result.scalar_one_or_none()
    if not like:
        raise HTTPException(status_code=400, detail='Post not liked yet')

    await db.delete(like)
    post.likes_count = max(0, post.likes_count - 1)
    await db.commit()

    response = LikeResponse(likes_count=post.likes_count, is_liked=False)
    await ScoreLedger(db).apply(post.author_id, ScoreAction.POST_UNLIKED)
    return response


# ── Comments ─────────────────────────────────────────────────────────────────

@router.post(
    '/{post_id}/comments', response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    comment_data: CommentCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Comment on a post. Credits the post author +2 (not the commenter)."""
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail='Post not found')

    comment = Comment(post_id=post_id, author_id=user.id, content=comment_data.content)
    db.add(comment)
    post.comments_count += 1
    await db.commit()

    response = _comment_response(comment, user)
    await ScoreLedger(db).apply(post.author_id, ScoreAction.COMMENT_RECEIVED)
    return response


@router.get('/{post_id}/comments', response_model=list[CommentResponse])
async def get_comments(
    post_id: int,
    user_id: int | None = Query(None, description='Current user for is_liked'),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Comments on a post, newest first."""
    post = await db.get(Post, post_id)
    if not post:
        raise HTTPException(status_code=404, detail='Post not found')

    result = await db.execute(
        select(Comment)
        .options(selectinload(Comment.author))
        .where(Comment.post_id == post_id)
        .order_by(desc(Comment.created_at), desc(Comment.id))
        .limit(limit)
        .offset(offset)
    )
    comments = list(result.scalars().all())

    liked_ids = await _check_comment_liked(
        db, [c.id for c in comments], user_id or 0,
    )

    return [
        _comment_response(c, c.author, is_liked=c.id in liked_ids)
        for c in comments
    ]


# ── Comment Likes ────────────────────────────────────────────────────────────
# Comment likes only touch the comment; they have no score effect.

@router.post('/{post_id}/comments/{comment_id}/like', response_model=LikeResponse)
async def like_comment(
    post_id: int,
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Like a comment. Double-like is rejected."""
    comment = await _get_comment(db, post_id, comment_id)

    existing = await db.execute(
        select(CommentLike).where(
            and_(CommentLike.comment_id == comment_id, CommentLike.user_id == user.id)
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail='Comment already liked')

    db.add(CommentLike(comment_id=comment_id, user_id=user.id))
    comment.likes_count += 1
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail='Comment already liked')

    return LikeResponse(likes_count=comment.likes_count, is_liked=True)


@router.delete('/{post_id}/comments/{comment_id}/like', response_model=LikeResponse)
async def unlike_comment(
    post_id: int,
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Unlike a comment. Rejected if not liked."""
    comment = await _get_comment(db, post_id, comment_id)

    result = await db.execute(
        select(CommentLike).where(
            and_(CommentLike.comment_id == comment_id, CommentLike.user_id == user.id)
        )
    )
    like = result.scalar_one_or_none()
    if not like:
        raise HTTPException(status_code=400, detail='Comment not liked yet')

    await db.delete(like)
    comment.likes_count = max(0, comment.likes_count - 1)
    await db.commit()

    return LikeResponse(likes_count=comment.likes_count, is_liked=False)
