import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from curated.core.errors import InvalidCredentialsError, UserNotFoundError
from curated.core.security import verify_token
from curated.db.repositories.user_repository import UserRepository
from curated.domains.identity.entities import Identity, User

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис разрешения токена в пользователя"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)

    async def get_user_from_token(self, token: str) -> User:
        """Пользователь по JWT токену"""
        payload = verify_token(token)
        if not payload or not payload.get("sub"):
            raise InvalidCredentialsError()

        try:
            user_uuid = uuid.UUID(payload["sub"])
        except (TypeError, ValueError):
            raise InvalidCredentialsError()

        user = await self.user_repository.get_by_uuid(user_uuid)

        if user is None or not user.is_active:
            logger.warning("Token subject %s does not resolve to an active user", user_uuid)
            raise UserNotFoundError()

        return user

    async def resolve_identity(self, token: str) -> Identity:
        """Разрешение токена в Identity(user_id, is_admin)"""
        user = await self.get_user_from_token(token)
        return user.to_identity()
