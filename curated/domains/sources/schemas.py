from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List
import uuid
from datetime import datetime


class AuthorCreate(BaseModel):
    """Схема для создания автора"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class AuthorResponse(BaseModel):
    """Схема для ответа с данными автора"""
    uuid: uuid.UUID
    first_name: str
    last_name: str
    submitted_by: uuid.UUID
    submitted_date: datetime

    model_config = ConfigDict(from_attributes=True)


class SourceCreate(BaseModel):
    """Схема для создания источника"""
    author_ids: List[uuid.UUID] = Field(..., min_length=1)
    title: Optional[str] = Field(None, max_length=512)


class SourceResponse(BaseModel):
    """Схема для ответа с данными источника"""
    uuid: uuid.UUID
    title: Optional[str] = None
    authors: List[AuthorResponse]
    submitted_by: uuid.UUID
    submitted_date: datetime

    model_config = ConfigDict(from_attributes=True)
