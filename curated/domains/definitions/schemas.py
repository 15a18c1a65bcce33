from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from typing import Optional, List
import uuid
from datetime import date, datetime

from curated.core.config import settings
from curated.domains.definitions.entities import (
    UNSET, SetTo, DefinitionChanges, DefinitionFilter, DefinitionSort, SortField, normalize_tags
)
from curated.domains.sources.schemas import SourceResponse


class DefinitionSubmit(BaseModel):
    """Схема для отправки определения на проверку"""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, max_length=100000)
    source_id: uuid.UUID
    publishing_date: date
    tags: List[str] = Field(default_factory=list)

    @field_validator('title', 'content')
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return normalize_tags(v)


class DefinitionChange(BaseModel):
    """Схема для правки определения: переданы только изменяемые поля"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1, max_length=100000)
    source_id: Optional[uuid.UUID] = None
    tags: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator('title', 'content')
    @classmethod
    def validate_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return normalize_tags(v) if v is not None else v

    @model_validator(mode='after')
    def validate_no_explicit_null(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f'{name} cannot be null')
        return self

    def to_changes(self) -> DefinitionChanges:
        """Разреженный набор правок: непереданные поля остаются UNSET"""
        return DefinitionChanges(**{
            name: SetTo(getattr(self, name)) if name in self.model_fields_set else UNSET
            for name in ("title", "content", "source_id", "tags")
        })


class RejectRequest(BaseModel):
    """Схема для отклонения определения"""
    content: str = Field(..., min_length=1, max_length=10000)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Rejection reason cannot be empty')
        return v.strip()


class RejectionResponse(BaseModel):
    """Схема для ответа с отклонением"""
    uuid: uuid.UUID
    rejected_by: uuid.UUID
    rejected_date: datetime
    content: str

    model_config = ConfigDict(from_attributes=True)


class DefinitionResponse(BaseModel):
    """Схема для ответа с данными определения"""
    uuid: uuid.UUID
    title: str
    content: str
    source_id: uuid.UUID
    source: Optional[SourceResponse] = None
    publishing_date: date
    tags: List[str]
    submitted_by: uuid.UUID
    submitted_date: datetime
    last_submit_change_date: datetime
    approved: bool
    approved_by: Optional[uuid.UUID] = None
    approved_date: Optional[datetime] = None
    rejection_count: int
    awaiting_author_response: bool


class DefinitionListResponse(BaseModel):
    """Схема для списка определений"""
    definitions: List[DefinitionResponse]


class DefinitionFilterSchema(BaseModel):
    """Фильтр листинга; все поля необязательны"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1, max_length=255)
    publishing_dates: Optional[List[date]] = Field(None, min_length=1)
    authors: Optional[List[uuid.UUID]] = Field(None, min_length=1)
    sources: Optional[List[uuid.UUID]] = Field(None, min_length=1)
    tags: Optional[List[str]] = Field(None, min_length=1)
    approved: Optional[bool] = None
    submitted_by: Optional[uuid.UUID] = None

    model_config = ConfigDict(extra="forbid")

    def to_filter(self) -> DefinitionFilter:
        return DefinitionFilter(**self.model_dump())


class DefinitionSortSchema(BaseModel):
    """Сортировка листинга"""
    field: SortField = SortField.SUBMITTED_DATE
    descending: bool = True

    def to_sort(self) -> DefinitionSort:
        return DefinitionSort(field=self.field, descending=self.descending)


class DefinitionPageRequest(BaseModel):
    """Схема для запроса страницы определений"""
    page_size: int = Field(settings.default_page_size, ge=1)
    page: int = Field(..., ge=1)
    filter: Optional[DefinitionFilterSchema] = None
    sort: Optional[DefinitionSortSchema] = None


class DefinitionPageCountRequest(BaseModel):
    """Схема для запроса количества страниц"""
    page_size: int = Field(settings.default_page_size, ge=1)
    filter: Optional[DefinitionFilterSchema] = None


class DefinitionPageCountResponse(BaseModel):
    count: int
    page_size: int


class DefinitionBatchRequest(BaseModel):
    """Схема для получения определений по списку UUID"""
    ids: List[uuid.UUID] = Field(..., min_length=1, max_length=100)
