from curated.domains.definitions.entities import (
    UNSET, SetTo, Definition, DefinitionChanges, DefinitionFilter, DefinitionSort, Rejection, SortField
)
from curated.domains.definitions.schemas import (
    DefinitionSubmit, DefinitionChange, RejectRequest, RejectionResponse, DefinitionResponse,
    DefinitionListResponse, DefinitionFilterSchema, DefinitionSortSchema, DefinitionPageRequest,
    DefinitionPageCountRequest, DefinitionPageCountResponse, DefinitionBatchRequest
)
from curated.domains.definitions.services import DefinitionService, DefinitionQueryService

__all__ = [
    "UNSET", "SetTo", "Definition", "DefinitionChanges", "DefinitionFilter", "DefinitionSort",
    "Rejection", "SortField",
    "DefinitionSubmit", "DefinitionChange", "RejectRequest", "RejectionResponse", "DefinitionResponse",
    "DefinitionListResponse", "DefinitionFilterSchema", "DefinitionSortSchema", "DefinitionPageRequest",
    "DefinitionPageCountRequest", "DefinitionPageCountResponse", "DefinitionBatchRequest",
    "DefinitionService", "DefinitionQueryService"
]
