import logging
import math
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy import select, desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from edushare.config import settings
from edushare.db.database import get_db
from edushare.models.resource import Resource
from edushare.models.user import User
from edushare.routes.deps import get_current_user, require_teacher
from edushare.schemas.resource import ResourceResponse, ResourcePage
from edushare.schemas.user import UserBrief
from edushare.services.storage import (
    LocalStorage, StorageError, get_storage, sanitize_filename, file_extension,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _resource_response(r: Resource, uploader: User) -> ResourceResponse:
    return ResourceResponse(
        id=r.id,
        title=r.title,
        description=r.description,
        subject=r.subject,
        course=r.course,
        semester=r.semester,
        tags=r.tags or [],
        file_url=r.file_url,
        original_filename=r.original_filename,
        mime_type=r.mime_type,
        format=r.format,
        size_bytes=r.size_bytes,
        uploaded_by=UserBrief(id=uploader.id, username=uploader.username, role=uploader.role),
        created_at=r.created_at,
    )


def _parse_semester(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value) or None
    except ValueError:
        raise HTTPException(status_code=400, detail='Semester must be a valid number.')


@router.post('/upload', response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
async def upload_resource(
    file: UploadFile | None = File(None),
    title: str | None = Form(None),
    description: str | None = Form(None),
    subject: str | None = Form(None),
    course: str | None = Form(None),
    semester: str | None = Form(None),
    tags: str | None = Form(None),
    user: User = Depends(get_current_user),
    storage: LocalStorage = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """Upload a study file with its catalogue metadata."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail='No file uploaded')

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f'File too large. Maximum size: {settings.max_upload_bytes // 1024 // 1024}MB',
        )

    semester_value = _parse_semester(semester)
    original_name = sanitize_filename(file.filename)
    try:
        key = storage.save(user.id, original_name, content)
    except StorageError as e:
        logger.error(f'Upload failed for user {user.id}: {e}')
        raise HTTPException(status_code=500, detail='Error uploading file')

    resource = Resource(
        title=(title or '').strip() or original_name,
        description=description,
        subject=(subject or '').strip() or 'general',
        course=course,
        semester=semester_value,
        tags=[t.strip() for t in tags.split(',') if t.strip()] if tags else [],
        storage_key=key,
        original_filename=original_name,
        mime_type=file.content_type,
        format=file_extension(original_name),
        size_bytes=len(content),
        uploaded_by_id=user.id,
    )
    db.add(resource)
    try:
        await db.flush()
    except SQLAlchemyError as e:
        logger.error(f'Saving resource record failed for user {user.id}: {e}')
        try:
            storage.delete(key)
        except StorageError as cleanup_error:
            logger.error(f'Could not remove orphaned upload {key}: {cleanup_error}')
        raise HTTPException(status_code=500, detail='Error uploading file')
    await db.refresh(resource)
    return _resource_response(resource, user)


@router.get('', response_model=ResourcePage)
async def get_resources(
    page: int = Query(1, ge=1),
    limit: int = Query(6, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Paged resource listing, newest first."""
    total = await db.scalar(select(func.count()).select_from(Resource)) or 0
    result = await db.execute(
        select(Resource)
        .options(selectinload(Resource.uploaded_by))
        .order_by(desc(Resource.created_at), desc(Resource.id))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    items = [_resource_response(r, r.uploaded_by) for r in result.scalars().all()]
    return ResourcePage(
        items=items,
        page=page,
        total_pages=max(math.ceil(total / limit), 1),
        total=total,
        limit=limit,
    )


@router.get('/{resource_id}/download')
async def download_resource(
    resource_id: int,
    storage: LocalStorage = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """Send the stored file as an attachment."""
    resource = await db.get(Resource, resource_id)
    if not resource:
        raise HTTPException(status_code=404, detail='Resource not found')

    path = storage.resolve(resource.storage_key)
    if path is None:
        logger.error(f'Stored object missing for resource {resource.id}: {resource.storage_key}')
        raise HTTPException(status_code=502, detail='File not available from storage')

    filename = sanitize_filename(
        resource.original_filename or resource.title, default=f'resource-{resource.id}',
    )
    return FileResponse(
        path,
        media_type=resource.mime_type or 'application/octet-stream',
        filename=filename,
    )


@router.delete('/{resource_id}', status_code=status.HTTP_200_OK)
async def delete_resource(
    resource_id: int,
    user: User = Depends(require_teacher),
    storage: LocalStorage = Depends(get_storage),
    db: AsyncSession = Depends(get_db),
):
    """Delete a resource (teachers only). Storage cleanup is best-effort."""
    resource = await db.get(Resource, resource_id)
    if not resource:
        raise HTTPException(status_code=404, detail='Resource not found')

    try:
        storage.delete(resource.storage_key)
    except StorageError as e:
        logger.error(f'Storage delete failed for resource {resource.id}: {e}')

    await db.delete(resource)
    return {'message': 'Deleted'}
