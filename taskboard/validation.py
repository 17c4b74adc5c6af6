"""
Taskboard API - Validation helpers

Every input shape is a pydantic model; ``parse`` runs one against raw input
and reports violations as a taskboard ValidationError.
"""

from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, ValidationInfo
from pydantic.alias_generators import to_camel

from taskboard.errors import ValidationError, violations_from_pydantic

ModelT = TypeVar("ModelT", bound=BaseModel)

# local@domain.tld
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
# Optional leading +, then up to 15 digits, no leading zero
PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"

# Largest integer BSON can store; ids and page offsets must fit
MAX_ID = 2**63 - 1


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validation_now(info: ValidationInfo) -> datetime:
    """The instant a validation runs against; overridable through context."""
    context = info.context or {}
    now = context.get("now")
    return as_utc(now) if now is not None else _utcnow()


def parse(model: type[ModelT], raw: Any, now: Optional[datetime] = None) -> ModelT:
    """Validate ``raw`` against ``model`` or raise ValidationError with details."""
    context = {"now": now} if now is not None else None
    try:
        return model.model_validate(raw, context=context)
    except pydantic.ValidationError as exc:
        raise ValidationError(details=violations_from_pydantic(exc.errors())) from exc
