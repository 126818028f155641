from .base import (
    AlreadyExistsError,
    AppError,
    DomainError,
    InfrastructureError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from .http import handle_app_error, register_error_handler

__all__ = [
    "AlreadyExistsError",
    "AppError",
    "DomainError",
    "InfrastructureError",
    "InternalError",
    "InvalidArgumentError",
    "NotFoundError",
    "PermissionDeniedError",
    "UnauthenticatedError",
    "handle_app_error",
    "register_error_handler",
]
