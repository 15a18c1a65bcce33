import uuid
from datetime import datetime
from typing import List, Optional

from curated.core.errors import InvalidInputError


class Author:
    """Автор, на которого ссылаются источники"""

    def __init__(
        self,
        uuid: uuid.UUID,
        first_name: str,
        last_name: str,
        submitted_by: uuid.UUID,
        submitted_date: datetime
    ):
        self.uuid = uuid
        self.first_name = first_name
        self.last_name = last_name
        self.submitted_by = submitted_by
        self.submitted_date = submitted_date

    @classmethod
    def create_author(cls, first_name: str, last_name: str, submitted_by: uuid.UUID, now: datetime) -> "Author":
        """Создание нового автора"""
        if not first_name or not first_name.strip() or not last_name or not last_name.strip():
            raise InvalidInputError("Author first and last name are required")

        return cls(
            uuid=uuid.uuid4(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            submitted_by=submitted_by,
            submitted_date=now
        )

    def get_full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Author):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Author(uuid={self.uuid}, name={self.get_full_name()})"


class Source:
    """Источник определения (публикация одного или нескольких авторов)"""

    def __init__(
        self,
        uuid: uuid.UUID,
        authors: List[Author],
        submitted_by: uuid.UUID,
        submitted_date: datetime,
        title: Optional[str] = None
    ):
        self.uuid = uuid
        self.title = title
        self.authors = authors
        self.submitted_by = submitted_by
        self.submitted_date = submitted_date

    @classmethod
    def create_source(
        cls,
        authors: List[Author],
        submitted_by: uuid.UUID,
        now: datetime,
        title: Optional[str] = None
    ) -> "Source":
        """Создание нового источника"""
        if not authors:
            raise InvalidInputError("A source needs at least one author")

        return cls(
            uuid=uuid.uuid4(),
            title=title.strip() if title and title.strip() else None,
            authors=authors,
            submitted_by=submitted_by,
            submitted_date=now
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Source):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Source(uuid={self.uuid}, authors={len(self.authors)})"
