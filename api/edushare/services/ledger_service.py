import logging
from enum import IntEnum
from sqlalchemy import select, update, case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.models.user import User

logger = logging.getLogger(__name__)


class ScoreAction(IntEnum):
    """Fixed point deltas per engagement action."""
    CREATE_POST = 5
    POST_LIKED = 1
    POST_UNLIKED = -1
    COMMENT_RECEIVED = 2
    FOLLOWED = 3
    UNFOLLOWED = -3


def _floored(column, delta: int):
    """SQL expression for `column + delta`, floored at zero."""
    return case((column + delta < 0, 0), else_=column + delta)


class ScoreLedger:
    """Owns every write to the user score columns.

    Callers never touch `score`, `weekly_score` or `lifetime_score` directly;
    they go through `adjust_score`. Adjustments are best-effort side effects:
    failures are logged and reported as False, never raised.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def adjust_score(self, user_id: int | None, delta: int) -> bool:
        """Apply a signed delta to a user's scores in one guarded UPDATE.

        The increment and the zero floor are a single statement, so
        concurrent adjustments to the same user both apply and no reader
        ever sees a negative value. Commits its own unit of work.
        """
        if not user_id:
            logger.warning('adjust_score: no user id provided (delta=%s)', delta)
            return False

        delta = int(delta)
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                score=_floored(User.score, delta),
                weekly_score=_floored(User.weekly_score, delta),
                lifetime_score=_floored(User.lifetime_score, delta),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                logger.warning('adjust_score: user %s not found (delta=%s)', user_id, delta)
                return False
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error('adjust_score failed for user %s (delta=%s): %s', user_id, delta, e)
            return False

        return True

    async def apply(self, user_id: int | None, action: ScoreAction) -> bool:
        """Adjust a user's score by the fixed delta for `action`."""
        return await self.adjust_score(user_id, action.value)

    async def get_scores(self, user_id: int) -> tuple[int, int] | None:
        """Current (weekly, lifetime) scores, or None for an unknown user."""
        result = await self.db.execute(
            select(User.weekly_score, User.lifetime_score).where(User.id == user_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return row.weekly_score, row.lifetime_score
