import logging
import math
from datetime import datetime
from typing import Callable, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from curated.core.config import settings
from curated.core.errors import (
    AlreadyApprovedError, DefinitionNotFoundError, InvalidInputError, NotEnoughPermissionsError,
    OwnershipError, RejectionNotAnsweredYetError, SourceNotFoundError, StoreError
)
from curated.db.base import utcnow
from curated.db.repositories.definition_repository import DefinitionRepository, DefinitionGuard
from curated.db.repositories.source_repository import SourceRepository
from curated.domains.definitions.entities import (
    Definition, DefinitionChanges, DefinitionFilter, DefinitionSort, Rejection, normalize_tags
)
from curated.domains.definitions.schemas import DefinitionSubmit
from curated.domains.identity.entities import Identity

logger = logging.getLogger(__name__)


class DefinitionService:
    """Жизненный цикл определения: отправка, одобрение, отклонение, правка"""

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.definition_repository = DefinitionRepository(session)
        self.source_repository = SourceRepository(session)

    async def submit_definition(self, definition_data: DefinitionSubmit, identity: Identity) -> Definition:
        """Отправка нового определения на проверку"""
        definition = Definition.submit(
            title=definition_data.title,
            content=definition_data.content,
            source_id=definition_data.source_id,
            publishing_date=definition_data.publishing_date,
            tags=definition_data.tags,
            submitted_by=identity.user_id,
            now=self.clock()
        )

        if not await self.source_repository.exists(definition.source_id):
            raise SourceNotFoundError()

        created = await self.definition_repository.create(definition)
        logger.info("Definition %s submitted by %s", created.uuid, identity.user_id)
        return created

    async def approve_definition(self, definition_uuid: uuid.UUID, identity: Identity) -> None:
        """Одобрение определения администратором (после него определение неизменяемо)"""
        self._ensure_admin(identity)

        definition = await self._get_definition(definition_uuid)
        definition.ensure_pending()

        approved = await self.definition_repository.update_if(
            definition_uuid,
            DefinitionGuard(pending=True),
            {
                "approved": True,
                "approved_by": identity.user_id,
                "approved_date": self.clock()
            }
        )

        if not approved:
            await self._raise_refused_write(definition_uuid)

        logger.info("Definition %s approved by %s", definition_uuid, identity.user_id)

    async def reject_definition(self, definition_uuid: uuid.UUID, identity: Identity, reason: str) -> None:
        """Отклонение текущей редакции определения с указанием причины"""
        self._ensure_admin(identity)

        definition = await self._get_definition(definition_uuid)
        definition.ensure_pending()

        if definition.awaiting_author_response:
            logger.warning(
                "Rejection of definition %s by %s refused: previous rejection not answered",
                definition_uuid, identity.user_id
            )
            raise RejectionNotAnsweredYetError()

        rejection = Rejection.create_rejection(
            definition_id=definition_uuid,
            rejected_by=identity.user_id,
            content=reason,
            now=self.clock()
        )

        appended = await self.definition_repository.append_rejection_if(
            definition_uuid,
            DefinitionGuard(pending=True, no_outstanding_rejection=True),
            rejection
        )

        if not appended:
            await self._raise_refused_write(definition_uuid, check_ledger=True)

        logger.info("Definition %s rejected by %s", definition_uuid, identity.user_id)

    async def edit_definition(
        self,
        definition_uuid: uuid.UUID,
        changes: DefinitionChanges,
        identity: Identity
    ) -> None:
        """Правка ожидающего проверки определения его автором"""
        definition = await self._get_definition(definition_uuid)
        definition.ensure_pending()
        definition.ensure_submitted_by(identity)

        if changes.is_empty():
            # пустая правка не должна отвечать на отклонение
            logger.debug("Empty edit of definition %s ignored", definition_uuid)
            return

        values = changes.assigned()
        tags = None

        if "tags" in values:
            tags = values.pop("tags")
            if tags is None:
                raise InvalidInputError("Tags cannot be null")
            tags = normalize_tags(tags)

        if "title" in values:
            if not values["title"] or not values["title"].strip():
                raise InvalidInputError("Title cannot be empty")
            values["title"] = values["title"].strip()

        if "content" in values and (not values["content"] or not values["content"].strip()):
            raise InvalidInputError("Content cannot be empty")

        if "source_id" in values:
            if values["source_id"] is None or not await self.source_repository.exists(values["source_id"]):
                raise SourceNotFoundError()

        values["last_submit_change_date"] = self.clock()

        updated = await self.definition_repository.update_if(
            definition_uuid,
            DefinitionGuard(pending=True, submitted_by=identity.user_id),
            values,
            tags=tags
        )

        if not updated:
            await self._raise_refused_write(definition_uuid, identity=identity)

        logger.info("Definition %s edited by %s", definition_uuid, identity.user_id)

    async def get_rejections(self, definition_uuid: uuid.UUID, identity: Identity) -> List[Rejection]:
        """Журнал отклонений (виден автору и администраторам)"""
        definition = await self._get_definition(definition_uuid)

        if not definition.can_view_rejections(identity):
            raise NotEnoughPermissionsError("Only the submitter or an administrator can view rejections")

        return await self.definition_repository.get_rejections(definition_uuid)

    async def _get_definition(self, definition_uuid: uuid.UUID) -> Definition:
        definition = await self.definition_repository.get_by_uuid(definition_uuid)
        if not definition:
            raise DefinitionNotFoundError()
        return definition

    async def _raise_refused_write(
        self,
        definition_uuid: uuid.UUID,
        identity: Optional[Identity] = None,
        check_ledger: bool = False
    ) -> None:
        """Условная запись не сработала: определяем, какое условие нарушено"""
        definition = await self._get_definition(definition_uuid)
        logger.warning("Conditional write on definition %s refused by the store", definition_uuid)

        if definition.approved:
            raise AlreadyApprovedError()
        if identity is not None and definition.submitted_by != identity.user_id:
            raise OwnershipError()
        if check_ledger and definition.awaiting_author_response:
            raise RejectionNotAnsweredYetError()

        raise StoreError("Definition changed concurrently, nothing was written")

    @staticmethod
    def _ensure_admin(identity: Identity) -> None:
        if not identity.is_admin:
            raise NotEnoughPermissionsError()


class DefinitionQueryService:
    """Чтение и листинг определений"""

    def __init__(
        self,
        session: AsyncSession,
        max_page_size: int = settings.max_page_size,
        newest_limit_max: int = settings.newest_limit_max
    ):
        self.session = session
        self.max_page_size = max_page_size
        self.newest_limit_max = newest_limit_max
        self.definition_repository = DefinitionRepository(session)

    async def get_by_id(self, definition_uuid: uuid.UUID) -> Definition:
        """Получение определения по UUID"""
        definition = await self.definition_repository.get_by_uuid(definition_uuid)
        if not definition:
            raise DefinitionNotFoundError()
        return definition

    async def get_by_ids(self, definition_uuids: Sequence[uuid.UUID]) -> List[Definition]:
        """Получение определений по списку UUID (отсутствующие пропускаются)"""
        unique_uuids = list(dict.fromkeys(definition_uuids))
        return await self.definition_repository.get_by_uuids(unique_uuids)

    async def get_newest(self, limit: int) -> List[Definition]:
        """Последние отправленные определения"""
        if limit < 1:
            raise InvalidInputError("Limit must be positive")

        return await self.definition_repository.find(
            sort=DefinitionSort(),
            limit=min(limit, self.newest_limit_max)
        )

    async def get_page(
        self,
        page_size: int,
        page: int,
        definition_filter: Optional[DefinitionFilter] = None,
        sort: Optional[DefinitionSort] = None
    ) -> List[Definition]:
        """Страница определений (нумерация страниц с 1)"""
        self._validate_page_size(page_size)
        if page < 1:
            raise InvalidInputError("Page numbers start at 1")

        return await self.definition_repository.find(
            definition_filter=definition_filter,
            sort=sort,
            offset=(page - 1) * page_size,
            limit=page_size
        )

    async def get_page_count(self, page_size: int, definition_filter: Optional[DefinitionFilter] = None) -> int:
        """Количество страниц для фильтра"""
        self._validate_page_size(page_size)

        total = await self.definition_repository.count(definition_filter)
        return math.ceil(total / page_size)

    def _validate_page_size(self, page_size: int) -> None:
        if page_size < 1 or page_size > self.max_page_size:
            raise InvalidInputError(f"Page size must be between 1 and {self.max_page_size}")
