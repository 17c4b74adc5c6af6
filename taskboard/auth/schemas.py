"""
Taskboard API - Authentication Schemas

Pydantic models for authentication requests and responses.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, StringConstraints

from taskboard.auth.models import User
from taskboard.validation import CamelModel, EMAIL_PATTERN, PHONE_PATTERN


NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
EmailStr = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255, pattern=EMAIL_PATTERN)]
PhoneStr = Annotated[str, StringConstraints(strip_whitespace=True, pattern=PHONE_PATTERN)]
ProfileText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255)]


class UserRegisterRequest(CamelModel):
    """Request schema for user registration."""

    firstname: NameStr
    lastname: NameStr
    email: EmailStr
    # Whitespace is significant in passwords, so no stripping here
    password: str = Field(..., min_length=6, max_length=128)
    mobile_phone: Optional[PhoneStr] = None
    country: Optional[ProfileText] = None
    city: Optional[ProfileText] = None
    address: Optional[ProfileText] = None


class UserLoginRequest(CamelModel):
    """Request schema for user login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    """Public user information response. Never carries the password."""

    id: int
    firstname: str
    lastname: str
    email: str
    mobile_phone: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            firstname=user.firstname,
            lastname=user.lastname,
            email=user.email,
            mobile_phone=user.mobile_phone,
            country=user.country,
            city=user.city,
            address=user.address,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResponse(CamelModel):
    """Response schema for successful registration or login."""

    user: UserResponse
    token: str
