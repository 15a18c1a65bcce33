from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from curated.core.auth import get_current_identity
from curated.core.db import get_db
from curated.domains.identity.entities import Identity
from curated.domains.sources.schemas import AuthorCreate, AuthorResponse, SourceCreate, SourceResponse
from curated.domains.sources.services import SourceService

authors_router = APIRouter(prefix="/authors", tags=["authors"])
sources_router = APIRouter(prefix="/sources", tags=["sources"])


@authors_router.post("/", response_model=AuthorResponse, status_code=status.HTTP_201_CREATED)
async def create_author(
    author_data: AuthorCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Создание автора"""
    author = await SourceService(db).create_author(author_data, identity)
    return AuthorResponse.model_validate(author)


@authors_router.get("/{author_uuid}", response_model=AuthorResponse)
async def get_author(
    author_uuid: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Получение автора по UUID"""
    author = await SourceService(db).get_author(author_uuid)
    return AuthorResponse.model_validate(author)


@sources_router.post("/", response_model=SourceResponse, status_code=status.HTTP_201_CREATED)
async def create_source(
    source_data: SourceCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Создание источника"""
    source = await SourceService(db).create_source(source_data, identity)
    return SourceResponse.model_validate(source)


@sources_router.get("/{source_uuid}", response_model=SourceResponse)
async def get_source(
    source_uuid: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Получение источника по UUID"""
    source = await SourceService(db).get_source(source_uuid)
    return SourceResponse.model_validate(source)
