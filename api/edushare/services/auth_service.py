"""Password hashing (argon2id) and HS256 access tokens."""
from datetime import datetime, timedelta, timezone
from typing import Any

import argon2
import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.config import settings
from edushare.models.user import User

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)


class InvalidCredentials(Exception):
    """Raised when an email/password pair does not match an account."""
    pass


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True if the password matches. Never raises on mismatch."""
    try:
        return _hasher.verify(password_hash, password)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def create_access_token(user: User) -> str:
    """Signed token carrying the user id (`sub`) and role."""
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        'sub': str(user.id),
        'role': user.role,
        'iat': now,
        'exp': now + timedelta(days=settings.access_token_expire_days),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a token. Raises jwt.InvalidTokenError."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the matching user or raise InvalidCredentials."""
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentials('Invalid Credentials')
    return user
