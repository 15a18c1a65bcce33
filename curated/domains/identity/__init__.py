from curated.domains.identity.entities import Identity, User
from curated.domains.identity.schemas import UserResponse
from curated.domains.identity.services import IdentityService

__all__ = [
    "Identity",
    "User",
    "UserResponse",
    "IdentityService"
]
