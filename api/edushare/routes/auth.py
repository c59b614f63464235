from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.db.database import get_db
from edushare.models.user import User
from edushare.routes.deps import get_current_user
from edushare.schemas.user import RegisterRequest, LoginRequest, TokenResponse, MeResponse
from edushare.services.auth_service import (
    InvalidCredentials, authenticate, create_access_token, get_user_by_email, hash_password,
)

router = APIRouter()


@router.post('/register', response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account and return an access token."""
    if await get_user_by_email(db, data.email):
        raise HTTPException(status_code=400, detail='User already exists')

    existing = await db.execute(select(User).where(User.username == data.username))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail='Username already taken')

    user = User(
        username=data.username,
        email=data.email.strip().lower(),
        password_hash=hash_password(data.password),
        role=data.role,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail='User already exists')

    return TokenResponse(token=create_access_token(user))


@router.post('/login', response_model=TokenResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange email + password for an access token."""
    try:
        user = await authenticate(db, data.email, data.password)
    except InvalidCredentials:
        raise HTTPException(status_code=400, detail='Invalid Credentials')
    return TokenResponse(token=create_access_token(user))


@router.get('/me', response_model=MeResponse)
async def me(user: User = Depends(get_current_user)):
    """The authenticated user's own record."""
    return user
