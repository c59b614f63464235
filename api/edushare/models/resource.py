from datetime import datetime
from sqlalchemy import String, Integer, BigInteger, ForeignKey, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edushare.db.database import Base


class Resource(Base):
    """An uploaded study file plus its catalogue metadata."""

    __tablename__ = 'resources'

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    subject: Mapped[str] = mapped_column(String(100), index=True, default='general')
    course: Mapped[str | None] = mapped_column(String(100), default=None)
    semester: Mapped[int | None] = mapped_column(Integer, index=True, default=None)
    tags: Mapped[list] = mapped_column(JSON, default=list)

    # Storage
    storage_key: Mapped[str] = mapped_column(String(500))
    original_filename: Mapped[str] = mapped_column(String(255))
    mime_type: Mapped[str | None] = mapped_column(String(100), default=None)
    format: Mapped[str | None] = mapped_column(String(20), default=None)
    size_bytes: Mapped[int] = mapped_column(BigInteger, default=0)

    uploaded_by_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    uploaded_by: Mapped['User'] = relationship('User')

    @property
    def file_url(self) -> str:
        return f'/api/resources/{self.id}/download'
