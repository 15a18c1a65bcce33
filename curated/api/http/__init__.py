from curated.api.http.health import router as health_router
from curated.api.http.users import router as users_router
from curated.api.http.definitions import router as definitions_router
from curated.api.http.sources import authors_router, sources_router

__all__ = [
    "health_router",
    "users_router",
    "definitions_router",
    "authors_router",
    "sources_router"
]
