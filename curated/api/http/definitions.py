from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from curated.core.auth import get_current_identity
from curated.core.config import settings
from curated.core.db import get_db
from curated.domains.definitions.entities import Definition
from curated.domains.definitions.schemas import (
    DefinitionSubmit, DefinitionChange, RejectRequest, RejectionResponse, DefinitionResponse,
    DefinitionListResponse, DefinitionPageRequest, DefinitionPageCountRequest,
    DefinitionPageCountResponse, DefinitionBatchRequest
)
from curated.domains.definitions.services import DefinitionService, DefinitionQueryService
from curated.domains.identity.entities import Identity
from curated.domains.sources.schemas import SourceResponse

router = APIRouter(prefix="/definitions", tags=["definitions"])


def to_response(definition: Definition) -> DefinitionResponse:
    return DefinitionResponse(
        uuid=definition.uuid,
        title=definition.title,
        content=definition.content,
        source_id=definition.source_id,
        source=SourceResponse.model_validate(definition.source) if definition.source else None,
        publishing_date=definition.publishing_date,
        tags=definition.tags,
        submitted_by=definition.submitted_by,
        submitted_date=definition.submitted_date,
        last_submit_change_date=definition.last_submit_change_date,
        approved=definition.approved,
        approved_by=definition.approved_by,
        approved_date=definition.approved_date,
        rejection_count=len(definition.rejection_log),
        awaiting_author_response=definition.awaiting_author_response
    )


@router.post("/", response_model=DefinitionResponse, status_code=status.HTTP_201_CREATED)
async def submit_definition(
    definition_data: DefinitionSubmit,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Отправка определения на проверку"""
    definition = await DefinitionService(db).submit_definition(definition_data, identity)
    return to_response(definition)


@router.get("/newest", response_model=DefinitionListResponse)
async def get_newest_definitions(
    limit: int = Query(settings.newest_limit_default, ge=1),
    db: AsyncSession = Depends(get_db)
):
    """Последние отправленные определения"""
    definitions = await DefinitionQueryService(db).get_newest(limit)
    return DefinitionListResponse(definitions=[to_response(d) for d in definitions])


@router.post("/page", response_model=DefinitionListResponse)
async def get_definitions_page(
    page_request: DefinitionPageRequest,
    db: AsyncSession = Depends(get_db)
):
    """Страница определений с фильтром и сортировкой"""
    definitions = await DefinitionQueryService(db).get_page(
        page_size=page_request.page_size,
        page=page_request.page,
        definition_filter=page_request.filter.to_filter() if page_request.filter else None,
        sort=page_request.sort.to_sort() if page_request.sort else None
    )
    return DefinitionListResponse(definitions=[to_response(d) for d in definitions])


@router.post("/page-count", response_model=DefinitionPageCountResponse)
async def get_definitions_page_count(
    count_request: DefinitionPageCountRequest,
    db: AsyncSession = Depends(get_db)
):
    """Количество страниц для фильтра"""
    count = await DefinitionQueryService(db).get_page_count(
        page_size=count_request.page_size,
        definition_filter=count_request.filter.to_filter() if count_request.filter else None
    )
    return DefinitionPageCountResponse(count=count, page_size=count_request.page_size)


@router.post("/batch", response_model=DefinitionListResponse)
async def get_definitions_batch(
    batch_request: DefinitionBatchRequest,
    db: AsyncSession = Depends(get_db)
):
    """Определения по списку UUID"""
    definitions = await DefinitionQueryService(db).get_by_ids(batch_request.ids)
    return DefinitionListResponse(definitions=[to_response(d) for d in definitions])


@router.get("/{definition_uuid}", response_model=DefinitionResponse)
async def get_definition(
    definition_uuid: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Получение определения по UUID"""
    definition = await DefinitionQueryService(db).get_by_id(definition_uuid)
    return to_response(definition)


@router.patch("/{definition_uuid}", response_model=DefinitionResponse)
async def edit_definition(
    definition_uuid: uuid.UUID,
    change: DefinitionChange,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Правка определения автором до одобрения"""
    await DefinitionService(db).edit_definition(definition_uuid, change.to_changes(), identity)
    definition = await DefinitionQueryService(db).get_by_id(definition_uuid)
    return to_response(definition)


@router.post("/{definition_uuid}/approve", response_model=DefinitionResponse)
async def approve_definition(
    definition_uuid: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Одобрение определения администратором"""
    await DefinitionService(db).approve_definition(definition_uuid, identity)
    definition = await DefinitionQueryService(db).get_by_id(definition_uuid)
    return to_response(definition)


@router.post("/{definition_uuid}/reject", response_model=DefinitionResponse)
async def reject_definition(
    definition_uuid: uuid.UUID,
    reject_request: RejectRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Отклонение определения администратором"""
    await DefinitionService(db).reject_definition(definition_uuid, identity, reject_request.content)
    definition = await DefinitionQueryService(db).get_by_id(definition_uuid)
    return to_response(definition)


@router.get("/{definition_uuid}/rejections", response_model=List[RejectionResponse])
async def get_definition_rejections(
    definition_uuid: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Журнал отклонений определения"""
    rejections = await DefinitionService(db).get_rejections(definition_uuid, identity)
    return [RejectionResponse.model_validate(rejection) for rejection in rejections]
