from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# Fields a profile update may change
PROFILE_FIELDS = ("firstname", "lastname", "email", "mobile_phone", "country", "city", "address")


@dataclass
class User:
    """User entity. ``password_hash`` never leaves the service layer."""

    id: int
    firstname: str
    lastname: str
    email: str
    password_hash: str
    mobile_phone: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        user_id: int,
        firstname: str,
        lastname: str,
        email: str,
        password_hash: str,
        mobile_phone: Optional[str] = None,
        country: Optional[str] = None,
        city: Optional[str] = None,
        address: Optional[str] = None,
    ) -> "User":
        """Create a new user with the given sequence ID."""
        now = _utcnow()
        return cls(
            id=user_id,
            firstname=firstname,
            lastname=lastname,
            email=email,
            password_hash=password_hash,
            mobile_phone=mobile_phone,
            country=country,
            city=city,
            address=address,
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict:
        """Convert user to dictionary for MongoDB storage."""
        return {
            "_id": self.id,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "email": self.email,
            "email_lower": self.email.lower(),
            "password_hash": self.password_hash,
            "mobile_phone": self.mobile_phone,
            "country": self.country,
            "city": self.city,
            "address": self.address,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        """Create user from MongoDB document."""
        return cls(
            id=data["_id"],
            firstname=data["firstname"],
            lastname=data["lastname"],
            email=data["email"],
            password_hash=data["password_hash"],
            mobile_phone=data.get("mobile_phone"),
            country=data.get("country"),
            city=data.get("city"),
            address=data.get("address"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )
