from curated.db.repositories.user_repository import UserRepository
from curated.db.repositories.source_repository import AuthorRepository, SourceRepository
from curated.db.repositories.definition_repository import DefinitionRepository, DefinitionGuard

__all__ = [
    "UserRepository",
    "AuthorRepository",
    "SourceRepository",
    "DefinitionRepository",
    "DefinitionGuard"
]
