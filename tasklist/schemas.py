from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from tasklist.services.password_hasher import MAX_PASSWORD_BYTES

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class EmailNormalizingModel(BaseModel):
    """Emails are compared case-insensitively, so store them lowercased."""

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


def _check_password_bytes(value: str | None) -> str | None:
    if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class UserRegister(EmailNormalizingModel):
    username: str = Field(
        ..., min_length=1, max_length=50, description="Display name for the new account"
    )
    email: str = Field(
        ...,
        max_length=255,
        pattern=EMAIL_PATTERN,
        description="Login email, unique across accounts",
    )
    password: str = Field(..., min_length=6, description="Password for the new account")

    @field_validator("password")
    @classmethod
    def check_password(cls, value):
        return _check_password_bytes(value)


class UserLogin(EmailNormalizingModel):
    email: str = Field(..., description="Login email")
    password: str = Field(..., description="Password for login")


class ProfileUpdate(EmailNormalizingModel):
    """Any subset of the profile fields; omitted fields stay unchanged."""

    username: str | None = Field(None, min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    password: str | None = Field(None, min_length=6)

    @field_validator("password")
    @classmethod
    def check_password(cls, value):
        return _check_password_bytes(value)


class Token(BaseModel):
    token: str = Field(..., description="Signed session token")
    token_type: str = Field(default="bearer", description="Token type")


class ProfileInfo(BaseModel):
    username: str = Field(..., description="Display name")
    email: str = Field(..., description="Login email")

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str = Field(..., description="Response message")


class TodoCreate(BaseModel):
    # `todo` is the field name older clients send
    text: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("text", "todo"),
        description="Task description",
    )
    status: str | None = Field(
        None, min_length=1, max_length=30, description="Status label, 'pending' if omitted"
    )


class TodoUpdate(BaseModel):
    text: str | None = Field(
        None, min_length=1, validation_alias=AliasChoices("text", "todo")
    )
    status: str | None = Field(None, min_length=1, max_length=30)


class TodoCreated(MessageResponse):
    id: UUID = Field(..., description="Identifier of the new todo")


class TodoResponse(BaseModel):
    id: UUID
    owner_id: UUID
    text: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
