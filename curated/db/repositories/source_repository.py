import logging
from typing import List, Optional, Sequence, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, insert
from sqlalchemy.exc import SQLAlchemyError
import uuid

from curated.core.errors import StoreError
from curated.db.models.source import Author as AuthorModel, Source as SourceModel, source_authors

if TYPE_CHECKING:
    from curated.domains.sources.entities import Author, Source

logger = logging.getLogger(__name__)


class AuthorRepository:
    """Репозиторий для работы с авторами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, author: "Author") -> "Author":
        """Создание нового автора"""
        db_author = AuthorModel(
            uuid=author.uuid,
            first_name=author.first_name,
            last_name=author.last_name,
            submitted_by=author.submitted_by,
            submitted_date=author.submitted_date
        )

        self.session.add(db_author)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Could not store author %s", author.uuid)
            raise StoreError() from e
        return self._to_domain(db_author)

    async def get_by_uuid(self, author_uuid: uuid.UUID) -> Optional["Author"]:
        """Получение автора по UUID"""
        result = await self.session.execute(
            select(AuthorModel).where(AuthorModel.uuid == author_uuid)
        )
        db_author = result.scalar_one_or_none()
        return self._to_domain(db_author) if db_author else None

    async def get_by_uuids(self, author_uuids: Sequence[uuid.UUID]) -> List["Author"]:
        """Получение авторов по списку UUID (отсутствующие пропускаются)"""
        if not author_uuids:
            return []
        result = await self.session.execute(
            select(AuthorModel).where(AuthorModel.uuid.in_(list(author_uuids)))
        )
        return [self._to_domain(db_author) for db_author in result.scalars().all()]

    @staticmethod
    def _to_domain(db_author: AuthorModel) -> "Author":
        """Преобразование модели БД в доменную сущность"""
        from curated.domains.sources.entities import Author

        return Author(
            uuid=db_author.uuid,
            first_name=db_author.first_name,
            last_name=db_author.last_name,
            submitted_by=db_author.submitted_by,
            submitted_date=db_author.submitted_date
        )


class SourceRepository:
    """Репозиторий для работы с источниками"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, source: "Source") -> "Source":
        """Создание источника вместе со связями на авторов"""
        db_source = SourceModel(
            uuid=source.uuid,
            title=source.title,
            submitted_by=source.submitted_by,
            submitted_date=source.submitted_date
        )

        self.session.add(db_source)
        try:
            await self.session.flush()
            await self.session.execute(
                insert(source_authors),
                [{"source_id": source.uuid, "author_id": author.uuid} for author in source.authors]
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Could not store source %s", source.uuid)
            raise StoreError() from e

        return await self.get_by_uuid(source.uuid)

    async def get_by_uuid(self, source_uuid: uuid.UUID) -> Optional["Source"]:
        """Получение источника по UUID"""
        result = await self.session.execute(
            select(SourceModel)
            .where(SourceModel.uuid == source_uuid)
            .execution_options(populate_existing=True)
        )
        db_source = result.scalar_one_or_none()
        return self.to_domain(db_source) if db_source else None

    async def exists(self, source_uuid: uuid.UUID) -> bool:
        """Проверка существования источника"""
        result = await self.session.execute(
            select(SourceModel.uuid).where(SourceModel.uuid == source_uuid)
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    def to_domain(db_source: SourceModel) -> "Source":
        """Преобразование модели БД в доменную сущность"""
        from curated.domains.sources.entities import Source

        return Source(
            uuid=db_source.uuid,
            title=db_source.title,
            authors=[AuthorRepository._to_domain(db_author) for db_author in db_source.authors],
            submitted_by=db_source.submitted_by,
            submitted_date=db_source.submitted_date
        )
