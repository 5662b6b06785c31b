"""
Bookshelf API — Authentication Schemas
=======================================

What:  Request bodies for register/login and the user/token responses.
Why:   The password hash never leaves the server; responses are built from
       these models only.
"""

from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError


def _normalize_email(v: str) -> str:
    try:
        return validate_email(v.strip(), check_deliverability=False).normalized
    except EmailNotValidError:
        raise PydanticCustomError(
            "email",
            "The email field must be a valid email address.",
        )


class RegisterRequest(BaseModel):
    """Body of POST /register."""

    model_config = ConfigDict(strict=True)

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise PydanticCustomError("name_required", "The name field is required.")
        return stripped

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: str) -> str:
        return _normalize_email(v)


class LoginRequest(BaseModel):
    """
    Body of POST /login.

    The email is only normalized, not checked for syntax: a malformed address
    simply matches no user and gets the generic invalid-credentials answer.
    """

    model_config = ConfigDict(strict=True)

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        try:
            return _normalize_email(v)
        except PydanticCustomError:
            return v.strip()


class UserResponse(BaseModel):
    """Public view of a user."""

    id: int
    name: str
    email: str
    professional_email: bool = Field(
        description="False when the address belongs to a consumer mailbox provider"
    )
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    """
    Returned by register (201) and login (200).

    `token` is shown once; send it back as `Authorization: Bearer <token>`.
    """

    token: str
    token_type: str = "Bearer"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
