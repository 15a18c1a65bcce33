from curated.domains.sources.entities import Author, Source
from curated.domains.sources.schemas import AuthorCreate, AuthorResponse, SourceCreate, SourceResponse
from curated.domains.sources.services import SourceService

__all__ = [
    "Author", "Source",
    "AuthorCreate", "AuthorResponse", "SourceCreate", "SourceResponse",
    "SourceService"
]
