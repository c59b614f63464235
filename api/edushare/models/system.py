from datetime import datetime
from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from edushare.db.database import Base

WEEKLY_LEADERBOARD_KEY = 'weeklyLeaderboard'


class SystemState(Base):
    """Keyed singleton records for process-wide state (e.g. reset watermarks)."""

    __tablename__ = 'system_state'

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
