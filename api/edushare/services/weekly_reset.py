"""
Weekly leaderboard reset.

The weekly window runs from Sunday 00:00 (server-local time) to the next
Sunday 00:00. The last successful reset is persisted as a watermark
(`lastResetTs`, epoch milliseconds) on the `weeklyLeaderboard` system state
record; a check resets every user's weekly score when the current window
started after that watermark.

The check is plain check-then-act with no cross-process lock. Two processes
racing on the same stale watermark both reset, which is harmless.
"""
import logging
from datetime import datetime, time, timedelta
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.models.system import SystemState, WEEKLY_LEADERBOARD_KEY
from edushare.models.user import User

logger = logging.getLogger(__name__)


def to_epoch_ms(dt: datetime) -> int:
    """Epoch milliseconds. Naive datetimes are read as server-local time."""
    return int(dt.timestamp() * 1000)


def get_current_week_start(now: datetime | None = None) -> datetime:
    """Most recent Sunday 00:00 (local) at or before `now`."""
    if now is None:
        now = datetime.now()
    days_since_sunday = (now.weekday() + 1) % 7  # Monday=0 ... Sunday=6
    sunday = now.date() - timedelta(days=days_since_sunday)
    return datetime.combine(sunday, time.min, tzinfo=now.tzinfo)


async def get_last_reset_ts(db: AsyncSession) -> int:
    """Persisted watermark in epoch ms (0 when no reset ever ran)."""
    record = await db.get(SystemState, WEEKLY_LEADERBOARD_KEY)
    if not record or not record.value:
        return 0
    return int(record.value.get('lastResetTs') or 0)


async def perform_weekly_reset_if_needed(
    db: AsyncSession,
    now: datetime | None = None,
) -> bool:
    """Reset all weekly scores if a new weekly window began since the last reset.

    Returns True when a reset was performed, False when nothing was written.
    """
    if now is None:
        now = datetime.now()

    week_start_ms = to_epoch_ms(get_current_week_start(now))
    last_reset = await get_last_reset_ts(db)
    if week_start_ms <= last_reset:
        return False

    await db.execute(
        update(User)
        .values(weekly_score=0)
        .execution_options(synchronize_session=False)
    )

    # Upsert the watermark record
    result = await db.execute(
        select(SystemState).where(SystemState.key == WEEKLY_LEADERBOARD_KEY)
    )
    record = result.scalar_one_or_none()
    if not record:
        record = SystemState(key=WEEKLY_LEADERBOARD_KEY)
        db.add(record)
    record.value = {'lastResetTs': to_epoch_ms(now)}

    await db.commit()
    logger.info('Weekly leaderboard scores reset (window start %s)', get_current_week_start(now))
    return True
