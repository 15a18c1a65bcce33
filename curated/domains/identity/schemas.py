from pydantic import BaseModel, EmailStr, ConfigDict
import uuid


class UserResponse(BaseModel):
    """Схема для ответа с данными пользователя"""
    uuid: uuid.UUID
    email: EmailStr
    username: str
    is_admin: bool
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
