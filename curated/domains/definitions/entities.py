import enum
import uuid
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from curated.core.errors import AlreadyApprovedError, InvalidInputError, OwnershipError
from curated.domains.definitions import ledger
from curated.domains.identity.entities import Identity

T = TypeVar("T")

MAX_TAG_LENGTH = 100


class _Unset:
    """Поле не передано (в отличие от явно переданного пустого значения)"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


@dataclass(frozen=True)
class SetTo(Generic[T]):
    """Поле передано и должно получить значение value"""
    value: T


FieldChange = Union[_Unset, SetTo[T]]


@dataclass(frozen=True)
class DefinitionChanges:
    """Разреженный набор правок определения"""
    title: FieldChange[str] = UNSET
    content: FieldChange[str] = UNSET
    source_id: FieldChange[uuid.UUID] = UNSET
    tags: FieldChange[List[str]] = UNSET

    def assigned(self) -> Dict[str, Any]:
        """Только переданные поля: имя -> новое значение"""
        return {
            field.name: getattr(self, field.name).value
            for field in fields(self)
            if isinstance(getattr(self, field.name), SetTo)
        }

    def is_empty(self) -> bool:
        return not self.assigned()


def normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Обрезка пробелов и удаление дубликатов с сохранением порядка"""
    if tags is None:
        return []

    normalized = []
    for tag in tags:
        value = tag.strip() if isinstance(tag, str) else ""
        if not value:
            raise InvalidInputError("Tags cannot be empty")
        if len(value) > MAX_TAG_LENGTH:
            raise InvalidInputError(f"Tags cannot be longer than {MAX_TAG_LENGTH} characters")
        if value not in normalized:
            normalized.append(value)
    return normalized


class Rejection:
    """Отклонение определения администратором"""

    def __init__(
        self,
        uuid: uuid.UUID,
        rejected_by: uuid.UUID,
        rejected_date: datetime,
        content: str,
        definition_id: Optional[uuid.UUID] = None
    ):
        self.uuid = uuid
        self.definition_id = definition_id
        self.rejected_by = rejected_by
        self.rejected_date = rejected_date
        self.content = content

    @classmethod
    def create_rejection(
        cls,
        definition_id: uuid.UUID,
        rejected_by: uuid.UUID,
        content: str,
        now: datetime
    ) -> "Rejection":
        """Создание нового отклонения"""
        if not content or not content.strip():
            raise InvalidInputError("Rejection reason cannot be empty")

        return cls(
            uuid=uuid.uuid4(),
            definition_id=definition_id,
            rejected_by=rejected_by,
            rejected_date=now,
            content=content.strip()
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Rejection):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Rejection(uuid={self.uuid}, rejected_by={self.rejected_by}, rejected_date={self.rejected_date})"


class Definition:
    """Сущность определения домена Definitions"""

    def __init__(
        self,
        uuid: uuid.UUID,
        submitted_by: uuid.UUID,
        submitted_date: datetime,
        last_submit_change_date: datetime,
        title: str,
        content: str,
        source_id: uuid.UUID,
        publishing_date: date,
        tags: Optional[List[str]] = None,
        approved: bool = False,
        approved_by: Optional[uuid.UUID] = None,
        approved_date: Optional[datetime] = None,
        rejection_log: Optional[List[Rejection]] = None,
        source=None
    ):
        self.uuid = uuid
        self.submitted_by = submitted_by
        self.submitted_date = submitted_date
        self.last_submit_change_date = last_submit_change_date
        self.title = title
        self.content = content
        self.source_id = source_id
        self.publishing_date = publishing_date
        self.tags = tags if tags is not None else []
        self.approved = approved
        self.approved_by = approved_by
        self.approved_date = approved_date
        self.rejection_log = rejection_log if rejection_log is not None else []
        self.source = source

    @classmethod
    def submit(
        cls,
        title: str,
        content: str,
        source_id: uuid.UUID,
        publishing_date: date,
        submitted_by: uuid.UUID,
        now: datetime,
        tags: Optional[List[str]] = None
    ) -> "Definition":
        """Создание нового определения, ожидающего проверки"""
        if not title or not title.strip():
            raise InvalidInputError("Title cannot be empty")
        if not content or not content.strip():
            raise InvalidInputError("Content cannot be empty")
        if source_id is None:
            raise InvalidInputError("Source is required")
        if publishing_date is None:
            raise InvalidInputError("Publishing date is required")

        return cls(
            uuid=uuid.uuid4(),
            submitted_by=submitted_by,
            submitted_date=now,
            last_submit_change_date=now,
            title=title.strip(),
            content=content,
            source_id=source_id,
            publishing_date=publishing_date,
            tags=normalize_tags(tags)
        )

    @property
    def awaiting_author_response(self) -> bool:
        """Последнее отклонение ещё не отвечено правкой автора"""
        return ledger.has_outstanding_rejection(self.rejection_log, self.last_submit_change_date)

    def ensure_pending(self) -> None:
        if self.approved:
            raise AlreadyApprovedError()

    def ensure_submitted_by(self, identity: Identity) -> None:
        if self.submitted_by != identity.user_id:
            raise OwnershipError()

    def can_view_rejections(self, identity: Identity) -> bool:
        return identity.is_admin or self.submitted_by == identity.user_id

    def __eq__(self, other) -> bool:
        if not isinstance(other, Definition):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Definition(uuid={self.uuid}, title={self.title}, approved={self.approved})"


class SortField(str, enum.Enum):
    SUBMITTED_DATE = "submitted_date"
    LAST_SUBMIT_CHANGE_DATE = "last_submit_change_date"
    PUBLISHING_DATE = "publishing_date"
    TITLE = "title"


@dataclass(frozen=True)
class DefinitionSort:
    field: SortField = SortField.SUBMITTED_DATE
    descending: bool = True


@dataclass(frozen=True)
class DefinitionFilter:
    """Условия выборки; все поля необязательны и объединяются через AND"""
    title: Optional[str] = None
    content: Optional[str] = None
    publishing_dates: Optional[List[date]] = None
    authors: Optional[List[uuid.UUID]] = None
    sources: Optional[List[uuid.UUID]] = None
    tags: Optional[List[str]] = None
    approved: Optional[bool] = None
    submitted_by: Optional[uuid.UUID] = None
