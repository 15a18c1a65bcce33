import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """Аутентифицированный контекст запроса"""
    user_id: uuid.UUID
    is_admin: bool = False


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        uuid: uuid.UUID,
        email: str,
        username: str,
        is_admin: bool = False,
        is_active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.email = email
        self.username = username
        self.is_admin = is_admin
        self.is_active = is_active
        self.created_at = created_at
        self.updated_at = updated_at

    def to_identity(self) -> Identity:
        """Контекст, с которым работают сервисы домена"""
        return Identity(user_id=self.uuid, is_admin=self.is_admin)

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"User(uuid={self.uuid}, username={self.username}, is_admin={self.is_admin})"
