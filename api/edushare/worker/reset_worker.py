"""
Weekly Reset Worker

Polls the weekly leaderboard watermark on a fixed interval (once a minute by
default, first check immediately on start) and zeroes weekly scores when a
new Sunday-to-Sunday window has begun.

Runs inside the API process (started from the FastAPI lifespan) or standalone:
    python -m edushare.worker.reset_worker

Uses APScheduler for the interval job.
"""
import asyncio
import logging
from datetime import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edushare.config import settings
from edushare.services.weekly_reset import perform_weekly_reset_if_needed

logger = logging.getLogger(__name__)

JOB_ID = 'weekly_leaderboard_reset'


class WeeklyResetWorker:
    """Background worker for the weekly leaderboard reset."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        interval_seconds: int | None = None,
    ):
        if session_factory is None:
            from edushare.db.database import async_session
            session_factory = async_session
        self.async_session = session_factory
        self.interval_seconds = interval_seconds or settings.weekly_reset_interval_seconds
        self.scheduler = AsyncIOScheduler()

    def start(self, run_now: bool = True):
        """Register the interval job and start the scheduler.

        With `run_now` the first check fires immediately instead of one
        interval after start.
        """
        job_options = {}
        if run_now:
            job_options['next_run_time'] = datetime.now()
        self.scheduler.add_job(
            self.check,
            IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name='Weekly Leaderboard Reset Check',
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **job_options,
        )
        self.scheduler.start()
        logger.info(
            'Weekly reset scheduler started (checks every %ss)', self.interval_seconds,
        )

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info('Weekly reset scheduler stopped')

    async def check(self, now: datetime | None = None) -> bool:
        """Run one check cycle. Errors are logged and swallowed."""
        try:
            async with self.async_session() as session:
                return await perform_weekly_reset_if_needed(session, now=now)
        except Exception as e:
            logger.error(f'Weekly reset check failed: {e}', exc_info=True)
            return False


async def main():
    """Entry point for the standalone worker."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    worker = WeeklyResetWorker()
    worker.start()

    # Keep running
    try:
        while True:
            await asyncio.sleep(60)
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        logger.info('Shutting down...')
        worker.shutdown()


if __name__ == '__main__':
    asyncio.run(main())
