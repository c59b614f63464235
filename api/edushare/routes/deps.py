"""FastAPI authentication dependencies."""
import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from edushare.db.database import get_db
from edushare.models.user import User, UserRole
from edushare.services.auth_service import decode_access_token

_bearer = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Verify the bearer token and load its user. 401 on any failure."""
    try:
        payload = decode_access_token(credentials.credentials)
        user_id = int(payload['sub'])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise HTTPException(status_code=401, detail='Token is not valid') from e

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail='User not found')
    return user


async def require_teacher(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.TEACHER.value:
        raise HTTPException(status_code=403, detail='Forbidden')
    return user
