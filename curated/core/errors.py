"""Ошибки домена и их отображение в HTTP-статусы.

Каждый класс несёт стабильный машиночитаемый ``code``, по которому клиент
может ветвиться без разбора текста сообщения.
"""
from types import MappingProxyType
from typing import Mapping


class DomainError(Exception):
    """Базовая ошибка сервиса"""
    code = "INTERNAL_ERROR"
    default_message = "Internal error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class InvalidInputError(DomainError, ValueError):
    code = "INVALID_INPUT"
    default_message = "Invalid input"


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class DefinitionNotFoundError(NotFoundError):
    code = "DEFINITION_NOT_FOUND"
    default_message = "Definition not found"


class SourceNotFoundError(NotFoundError):
    code = "SOURCE_NOT_FOUND"
    default_message = "Source not found"


class AuthorNotFoundError(NotFoundError):
    code = "AUTHOR_NOT_FOUND"
    default_message = "Author not found"


class InvalidCredentialsError(DomainError):
    code = "INVALID_CREDENTIALS"
    default_message = "Could not validate credentials"


class NotEnoughPermissionsError(DomainError, PermissionError):
    code = "NOT_ENOUGH_PERMISSIONS"
    default_message = "Administrator privileges required"


class OwnershipError(DomainError, PermissionError):
    code = "DEFINITION_BELONGS_TO_ANOTHER_USER"
    default_message = "Only the submitter can change this definition"


class AlreadyApprovedError(DomainError):
    code = "DEFINITION_ALREADY_APPROVED"
    default_message = "Definition is already approved"


class RejectionNotAnsweredYetError(DomainError):
    code = "DEFINITION_REJECTION_NOT_ANSWERED_YET"
    default_message = "The last rejection has not been answered by the author yet"


class StoreError(DomainError):
    code = "STORE_ERROR"
    default_message = "Storage operation failed"


ERROR_STATUS_CODES: Mapping[str, int] = MappingProxyType({
    InvalidInputError.code: 400,
    UserNotFoundError.code: 404,
    DefinitionNotFoundError.code: 404,
    SourceNotFoundError.code: 404,
    AuthorNotFoundError.code: 404,
    NotFoundError.code: 404,
    InvalidCredentialsError.code: 401,
    NotEnoughPermissionsError.code: 403,
    OwnershipError.code: 403,
    AlreadyApprovedError.code: 409,
    RejectionNotAnsweredYetError.code: 409,
    StoreError.code: 503,
})


def status_for(error: DomainError) -> int:
    """HTTP-статус для ошибки домена (500 для неизвестных кодов)"""
    return ERROR_STATUS_CODES.get(error.code, 500)
