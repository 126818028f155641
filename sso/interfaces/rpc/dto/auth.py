from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Absent fields take the zero value, as in proto3, and are then validated.
_REQUEST_CONFIG = ConfigDict(extra="ignore", validate_default=True)

# Ids are stored as signed 64-bit integers.
MAX_USER_ID = 2**63 - 1

FIELD_MESSAGES = {
    "login": "login is required",
    "password": "password is required",
    "new_password": "password is required",
    "telegram_login": "telegram login is required",
    "user_id": "user_id must be an integer between 0 and 2^63-1",
}


class RegisterRequestDTO(BaseModel):
    model_config = _REQUEST_CONFIG

    login: str = Field("", min_length=1)
    password: str = Field("", min_length=1)
    telegram_login: str = Field("", min_length=1)


class AuthorizeRequestDTO(BaseModel):
    model_config = _REQUEST_CONFIG

    login: str = Field("", min_length=1)
    password: str = Field("", min_length=1)


class UserIdRequestDTO(BaseModel):
    model_config = _REQUEST_CONFIG

    user_id: int = Field(0, ge=0, le=MAX_USER_ID, strict=True)


class ChangePasswordRequestDTO(BaseModel):
    model_config = _REQUEST_CONFIG

    user_id: int = Field(0, ge=0, le=MAX_USER_ID, strict=True)
    new_password: str = Field("", min_length=1)


class GetUserByTelegramRequestDTO(BaseModel):
    model_config = _REQUEST_CONFIG

    telegram_login: str = Field("", min_length=1)


class EmptyRequestDTO(BaseModel):
    model_config = _REQUEST_CONFIG


class TokenResponseDTO(BaseModel):
    token: str


class IsAdminResponseDTO(BaseModel):
    is_admin: bool
