from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.models.user import User

LEADERBOARD_SIZE = 10


async def get_top_contributors(db: AsyncSession, limit: int = LEADERBOARD_SIZE) -> list[User]:
    """Top users by weekly score, highest first. Ties keep storage order."""
    result = await db.execute(
        select(User)
        .order_by(desc(User.weekly_score))
        .limit(limit)
    )
    return list(result.scalars().all())
