from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import select, func, and_, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edushare.db.database import get_db
from edushare.models.user import User, Follow
from edushare.models.post import Post
from edushare.routes.deps import get_current_user
from edushare.routes.posts import build_post_response, check_post_liked
from edushare.schemas.post import UserPostsResponse
from edushare.schemas.user import UserBrief, UserProfile
from edushare.services.ledger_service import ScoreLedger, ScoreAction

router = APIRouter()


@router.get('/{user_id}', response_model=UserPostsResponse)
async def get_user(
    user_id: int,
    current_user_id: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Public profile plus the user's posts, newest first."""
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail='User not found')

    # Count followers and following
    followers_count = await db.scalar(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    )
    following_count = await db.scalar(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    )

    # Check if current user is following
    is_following = False
    if current_user_id:
        follow = await db.execute(
            select(Follow).where(
                and_(Follow.follower_id == current_user_id, Follow.following_id == user_id)
            )
        )
        is_following = follow.scalar_one_or_none() is not None

    result = await db.execute(
        select(Post)
        .options(selectinload(Post.author))
        .where(Post.author_id == user_id)
        .order_by(desc(Post.created_at), desc(Post.id))
    )
    posts = list(result.scalars().all())
    liked_ids = await check_post_liked(db, [p.id for p in posts], current_user_id or 0)

    profile = UserProfile(
        id=user.id,
        username=user.username,
        role=user.role,
        weekly_score=user.weekly_score,
        lifetime_score=user.lifetime_score,
        created_at=user.created_at,
        followers_count=followers_count or 0,
        following_count=following_count or 0,
        is_following=is_following,
    )
    return UserPostsResponse(
        user=profile,
        posts=[build_post_response(p, is_liked=p.id in liked_ids) for p in posts],
    )


@router.post('/{user_id}/follow', status_code=status.HTTP_201_CREATED)
async def follow_user(
    user_id: int,
    follower: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Follow a user. Credits the followed user +3."""
    if user_id == follower.id:
        raise HTTPException(status_code=400, detail='You cannot follow yourself')

    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail='User not found')

    # Check if already following
    existing = await db.execute(
        select(Follow).where(
            and_(Follow.follower_id == follower.id, Follow.following_id == user_id)
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail='Already following')

    db.add(Follow(follower_id=follower.id, following_id=user_id))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail='Already following')

    await ScoreLedger(db).apply(user_id, ScoreAction.FOLLOWED)
    return {'status': 'followed'}


@router.delete('/{user_id}/follow', status_code=status.HTTP_200_OK)
async def unfollow_user(
    user_id: int,
    follower: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Unfollow a user. Debits the unfollowed user -3."""
    result = await db.execute(
        select(Follow).where(
            and_(Follow.follower_id == follower.id, Follow.following_id == user_id)
        )
    )
    follow = result.scalar_one_or_none()
    if not follow:
        raise HTTPException(status_code=404, detail='Not following this user')

    await db.delete(follow)
    await db.commit()

    await ScoreLedger(db).apply(user_id, ScoreAction.UNFOLLOWED)
    return {'status': 'unfollowed'}


@router.get('/{user_id}/followers', response_model=list[UserBrief])
async def get_followers(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Get user's followers."""
    result = await db.execute(
        select(User)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == user_id)
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()


@router.get('/{user_id}/following', response_model=list[UserBrief])
async def get_following(
    user_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """Get users that this user follows."""
    result = await db.execute(
        select(User)
        .join(Follow, Follow.following_id == User.id)
        .where(Follow.follower_id == user_id)
        .limit(limit)
        .offset(offset)
    )
    return result.scalars().all()
