from datetime import datetime
from pydantic import BaseModel, Field

from edushare.schemas.user import UserBrief


class ResourceResponse(BaseModel):
    """Uploaded resource with its download route."""
    id: int
    title: str
    description: str | None
    subject: str
    course: str | None
    semester: int | None
    tags: list[str]
    file_url: str
    original_filename: str
    mime_type: str | None
    format: str | None
    size_bytes: int
    uploaded_by: UserBrief
    created_at: datetime

    class Config:
        from_attributes = True


class ResourcePage(BaseModel):
    items: list[ResourceResponse]
    page: int
    total_pages: int = Field(alias='totalPages')
    total: int
    limit: int

    class Config:
        populate_by_name = True
