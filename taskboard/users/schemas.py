"""
Taskboard API - User Schemas

Pydantic models for profile updates.
"""

from typing import Optional

from taskboard.auth.schemas import NameStr, EmailStr, PhoneStr, ProfileText
from taskboard.validation import CamelModel


class ProfileUpdateRequest(CamelModel):
    """Request model for updating the caller's profile.

    Names and email are always sent; the optional profile fields only change
    when present, and an explicit null clears them.
    """

    firstname: NameStr
    lastname: NameStr
    email: EmailStr
    mobile_phone: Optional[PhoneStr] = None
    country: Optional[ProfileText] = None
    city: Optional[ProfileText] = None
    address: Optional[ProfileText] = None
