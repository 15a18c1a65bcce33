from curated.db.models.user import User
from curated.db.models.source import Author, Source, source_authors
from curated.db.models.definition import Definition, DefinitionTag, Rejection

__all__ = [
    "User",
    "Author",
    "Source",
    "source_authors",
    "Definition",
    "DefinitionTag",
    "Rejection"
]
