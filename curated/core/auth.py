from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from curated.core.db import get_db
from curated.core.errors import InvalidCredentialsError
from curated.domains.identity.entities import Identity, User
from curated.domains.identity.services import IdentityService

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Зависимость для получения текущего пользователя"""
    if credentials is None:
        raise InvalidCredentialsError("Bearer token required")

    identity_service = IdentityService(db)
    return await identity_service.get_user_from_token(credentials.credentials)


async def get_current_identity(user: User = Depends(get_current_user)) -> Identity:
    """Зависимость для получения Identity(user_id, is_admin)"""
    return user.to_identity()
