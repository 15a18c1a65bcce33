import logging
from typing import Optional, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import uuid

from curated.core.errors import StoreError
from curated.db.models.user import User as UserModel

if TYPE_CHECKING:
    from curated.domains.identity.entities import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Репозиторий для работы с пользователями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: "User") -> "User":
        """Создание нового пользователя"""
        db_user = UserModel(
            uuid=user.uuid,
            email=user.email,
            username=user.username,
            is_admin=user.is_admin,
            is_active=user.is_active
        )

        self.session.add(db_user)
        try:
            await self.session.commit()
            await self.session.refresh(db_user)
            return self._to_domain(db_user)
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("User %s conflicts with an existing email or username", user.uuid)
            raise StoreError("User with this email or username already exists") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Could not store user %s", user.uuid)
            raise StoreError() from e

    async def get_by_uuid(self, user_uuid: uuid.UUID) -> Optional["User"]:
        """Получение пользователя по UUID"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.uuid == user_uuid)
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    def _to_domain(self, db_user: UserModel) -> "User":
        """Преобразование модели БД в доменную сущность"""
        from curated.domains.identity.entities import User

        return User(
            uuid=db_user.uuid,
            email=db_user.email,
            username=db_user.username,
            is_admin=db_user.is_admin,
            is_active=db_user.is_active,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at
        )
