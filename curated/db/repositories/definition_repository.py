"""Хранилище определений.

Все изменения состояния определения выполняются условной записью: вызывающий
передаёт ``DefinitionGuard``, и строка ``definitions`` меняется одним UPDATE только
если предикат истинен для этой строки в момент записи. Результат ``False`` означает, что предикат
не выполнился (или определения нет) и ничего не записано.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, insert, func, or_
from sqlalchemy.exc import SQLAlchemyError
import uuid

from curated.core.errors import StoreError
from curated.db.models.definition import (
    Definition as DefinitionModel, DefinitionTag as DefinitionTagModel, Rejection as RejectionModel
)
from curated.db.models.source import source_authors
from curated.db.repositories.source_repository import SourceRepository

if TYPE_CHECKING:
    from curated.domains.definitions.entities import (
        Definition, Rejection, DefinitionFilter, DefinitionSort
    )

logger = logging.getLogger(__name__)

definitions_table = DefinitionModel.__table__
rejections_table = RejectionModel.__table__
tags_table = DefinitionTagModel.__table__


@dataclass(frozen=True)
class DefinitionGuard:
    """Предикат условной записи"""
    pending: bool = True
    submitted_by: Optional[uuid.UUID] = None
    no_outstanding_rejection: bool = False


class DefinitionRepository:
    """Репозиторий для работы с определениями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, definition: "Definition") -> "Definition":
        """Сохранение нового определения"""
        db_definition = DefinitionModel(
            uuid=definition.uuid,
            submitted_by=definition.submitted_by,
            submitted_date=definition.submitted_date,
            last_submit_change_date=definition.last_submit_change_date,
            approved=False,
            approved_by=None,
            approved_date=None,
            title=definition.title,
            content=definition.content,
            source_id=definition.source_id,
            publishing_date=definition.publishing_date,
            tags=[
                DefinitionTagModel(tag=tag, position=position)
                for position, tag in enumerate(definition.tags)
            ]
        )

        self.session.add(db_definition)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Could not store definition %s", definition.uuid)
            raise StoreError() from e

        return await self.get_by_uuid(definition.uuid)

    async def get_by_uuid(self, definition_uuid: uuid.UUID) -> Optional["Definition"]:
        """Получение определения по UUID"""
        result = await self._execute(
            select(DefinitionModel)
            .where(DefinitionModel.uuid == definition_uuid)
            .execution_options(populate_existing=True)
        )
        db_definition = result.scalar_one_or_none()
        return self._to_domain(db_definition) if db_definition else None

    async def get_by_uuids(self, definition_uuids: Sequence[uuid.UUID]) -> List["Definition"]:
        """Получение определений по списку UUID в порядке запроса"""
        if not definition_uuids:
            return []

        result = await self._execute(
            select(DefinitionModel)
            .where(DefinitionModel.uuid.in_(list(definition_uuids)))
            .execution_options(populate_existing=True)
        )
        by_uuid = {db_definition.uuid: db_definition for db_definition in result.scalars().all()}
        return [self._to_domain(by_uuid[key]) for key in definition_uuids if key in by_uuid]

    async def find(
        self,
        definition_filter: Optional["DefinitionFilter"] = None,
        sort: Optional["DefinitionSort"] = None,
        offset: int = 0,
        limit: int = 100
    ) -> List["Definition"]:
        """Выборка определений по фильтру с сортировкой и пагинацией"""
        result = await self._execute(
            select(DefinitionModel)
            .where(*self._filter_clauses(definition_filter))
            .order_by(*self._order_by(sort))
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(db_definition) for db_definition in result.scalars().all()]

    async def count(self, definition_filter: Optional["DefinitionFilter"] = None) -> int:
        """Подсчет определений по фильтру"""
        result = await self._execute(
            select(func.count(DefinitionModel.uuid)).where(*self._filter_clauses(definition_filter))
        )
        return result.scalar() or 0

    async def update_if(
        self,
        definition_uuid: uuid.UUID,
        guard: DefinitionGuard,
        values: Dict[str, Any],
        tags: Optional[List[str]] = None
    ) -> bool:
        """Условное обновление полей определения (и замена тегов в той же транзакции)"""
        stmt = (
            update(definitions_table)
            .where(*self._guard_clauses(definition_uuid, guard))
            .values(**values)
        )

        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                await self.session.rollback()
                return False

            if tags is not None:
                await self.session.execute(
                    delete(tags_table).where(tags_table.c.definition_id == definition_uuid)
                )
                if tags:
                    await self.session.execute(
                        insert(tags_table),
                        [
                            {"definition_id": definition_uuid, "tag": tag, "position": position}
                            for position, tag in enumerate(tags)
                        ]
                    )

            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Conditional update of definition %s failed", definition_uuid)
            raise StoreError() from e

        return True

    async def append_rejection_if(
        self,
        definition_uuid: uuid.UUID,
        guard: DefinitionGuard,
        rejection: "Rejection"
    ) -> bool:
        """Добавление отклонения в журнал под условием guard.

        Условие проверяется тем же UPDATE строки определения, который
        сдвигает ``last_rejected_date``; запись в журнал идёт в той же
        транзакции только если строка обновилась.
        """
        stmt = (
            update(definitions_table)
            .where(*self._guard_clauses(definition_uuid, guard))
            .values(last_rejected_date=rejection.rejected_date)
        )

        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                await self.session.rollback()
                return False

            await self.session.execute(
                insert(rejections_table).values(
                    uuid=rejection.uuid,
                    definition_id=definition_uuid,
                    rejected_by=rejection.rejected_by,
                    rejected_date=rejection.rejected_date,
                    content=rejection.content
                )
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Appending rejection to definition %s failed", definition_uuid)
            raise StoreError() from e

        return True

    async def get_rejections(self, definition_uuid: uuid.UUID) -> List["Rejection"]:
        """Журнал отклонений определения по возрастанию даты"""
        result = await self._execute(
            select(RejectionModel)
            .where(RejectionModel.definition_id == definition_uuid)
            .order_by(RejectionModel.rejected_date.asc(), RejectionModel.uuid.asc())
        )
        return [self._rejection_to_domain(db_rejection) for db_rejection in result.scalars().all()]

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.exception("Definition query failed")
            raise StoreError() from e

    @staticmethod
    def _guard_clauses(definition_uuid: uuid.UUID, guard: DefinitionGuard) -> list:
        clauses = [definitions_table.c.uuid == definition_uuid]

        if guard.pending:
            clauses.append(definitions_table.c.approved.is_(False))

        if guard.submitted_by is not None:
            clauses.append(definitions_table.c.submitted_by == guard.submitted_by)

        if guard.no_outstanding_rejection:
            # равенство дат считается ответом на отклонение
            clauses.append(or_(
                definitions_table.c.last_rejected_date.is_(None),
                definitions_table.c.last_rejected_date <= definitions_table.c.last_submit_change_date
            ))

        return clauses

    @staticmethod
    def _filter_clauses(definition_filter: Optional["DefinitionFilter"]) -> list:
        if definition_filter is None:
            return []

        clauses = []

        if definition_filter.title:
            clauses.append(DefinitionModel.title.icontains(definition_filter.title, autoescape=True))

        if definition_filter.content:
            clauses.append(DefinitionModel.content.icontains(definition_filter.content, autoescape=True))

        if definition_filter.publishing_dates:
            clauses.append(DefinitionModel.publishing_date.in_(definition_filter.publishing_dates))

        if definition_filter.sources:
            clauses.append(DefinitionModel.source_id.in_(definition_filter.sources))

        if definition_filter.authors:
            clauses.append(
                DefinitionModel.source_id.in_(
                    select(source_authors.c.source_id)
                    .where(source_authors.c.author_id.in_(definition_filter.authors))
                )
            )

        if definition_filter.tags:
            clauses.append(
                DefinitionModel.uuid.in_(
                    select(DefinitionTagModel.definition_id)
                    .where(DefinitionTagModel.tag.in_(definition_filter.tags))
                )
            )

        if definition_filter.approved is not None:
            clauses.append(DefinitionModel.approved.is_(definition_filter.approved))

        if definition_filter.submitted_by is not None:
            clauses.append(DefinitionModel.submitted_by == definition_filter.submitted_by)

        return clauses

    @staticmethod
    def _order_by(sort: Optional["DefinitionSort"]) -> list:
        from curated.domains.definitions.entities import DefinitionSort

        sort = sort or DefinitionSort()
        column = getattr(DefinitionModel, sort.field.value)
        return [column.desc() if sort.descending else column.asc(), DefinitionModel.uuid.asc()]

    def _to_domain(self, db_definition: DefinitionModel) -> "Definition":
        """Преобразование модели БД в доменную сущность"""
        from curated.domains.definitions.entities import Definition

        return Definition(
            uuid=db_definition.uuid,
            submitted_by=db_definition.submitted_by,
            submitted_date=db_definition.submitted_date,
            last_submit_change_date=db_definition.last_submit_change_date,
            title=db_definition.title,
            content=db_definition.content,
            source_id=db_definition.source_id,
            publishing_date=db_definition.publishing_date,
            tags=[db_tag.tag for db_tag in db_definition.tags],
            approved=db_definition.approved,
            approved_by=db_definition.approved_by,
            approved_date=db_definition.approved_date,
            rejection_log=[self._rejection_to_domain(r) for r in db_definition.rejections],
            source=SourceRepository.to_domain(db_definition.source) if db_definition.source else None
        )

    @staticmethod
    def _rejection_to_domain(db_rejection: RejectionModel) -> "Rejection":
        from curated.domains.definitions.entities import Rejection

        return Rejection(
            uuid=db_rejection.uuid,
            definition_id=db_rejection.definition_id,
            rejected_by=db_rejection.rejected_by,
            rejected_date=db_rejection.rejected_date,
            content=db_rejection.content
        )
