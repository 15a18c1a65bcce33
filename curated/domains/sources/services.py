import logging
from datetime import datetime
from typing import Callable
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from curated.core.errors import AuthorNotFoundError, SourceNotFoundError
from curated.db.base import utcnow
from curated.db.repositories.source_repository import AuthorRepository, SourceRepository
from curated.domains.identity.entities import Identity
from curated.domains.sources.entities import Author, Source
from curated.domains.sources.schemas import AuthorCreate, SourceCreate

logger = logging.getLogger(__name__)


class SourceService:
    """Сервис для работы с авторами и источниками"""

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.author_repository = AuthorRepository(session)
        self.source_repository = SourceRepository(session)

    async def create_author(self, author_data: AuthorCreate, identity: Identity) -> Author:
        """Создание автора"""
        author = Author.create_author(
            first_name=author_data.first_name,
            last_name=author_data.last_name,
            submitted_by=identity.user_id,
            now=self.clock()
        )
        created = await self.author_repository.create(author)
        logger.info("Author %s created by %s", created.uuid, identity.user_id)
        return created

    async def get_author(self, author_uuid: uuid.UUID) -> Author:
        author = await self.author_repository.get_by_uuid(author_uuid)
        if not author:
            raise AuthorNotFoundError()
        return author

    async def create_source(self, source_data: SourceCreate, identity: Identity) -> Source:
        """Создание источника; все авторы должны существовать"""
        author_uuids = list(dict.fromkeys(source_data.author_ids))
        authors = await self.author_repository.get_by_uuids(author_uuids)

        if len(authors) != len(author_uuids):
            found = {author.uuid for author in authors}
            missing = [str(author_uuid) for author_uuid in author_uuids if author_uuid not in found]
            raise AuthorNotFoundError(f"Authors not found: {', '.join(missing)}")

        source = Source.create_source(
            authors=authors,
            submitted_by=identity.user_id,
            now=self.clock(),
            title=source_data.title
        )
        created = await self.source_repository.create(source)
        logger.info("Source %s created by %s", created.uuid, identity.user_id)
        return created

    async def get_source(self, source_uuid: uuid.UUID) -> Source:
        source = await self.source_repository.get_by_uuid(source_uuid)
        if not source:
            raise SourceNotFoundError()
        return source
