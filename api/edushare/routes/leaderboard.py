from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.db.database import get_db
from edushare.schemas.leaderboard import LeaderboardEntry, LeaderboardResponse
from edushare.services.leaderboard_service import get_top_contributors

router = APIRouter()


@router.get('', response_model=LeaderboardResponse)
async def get_leaderboard(db: AsyncSession = Depends(get_db)):
    """Top 10 contributors this week. Only public fields are returned."""
    users = await get_top_contributors(db)
    return LeaderboardResponse(
        leaderboard=[
            LeaderboardEntry(
                id=u.id,
                username=u.username,
                weekly_score=u.weekly_score,
                lifetime_score=u.lifetime_score,
                score=u.weekly_score,
            )
            for u in users
        ],
    )
