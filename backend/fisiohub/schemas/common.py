"""Shared schema building blocks: base configs, pagination, UTC datetimes."""

import math
from datetime import datetime, timezone
from typing import Annotated, Any, Generic, Sequence, TypeVar

from fastapi import Query
from pydantic import AfterValidator, BaseModel, Field

from fisiohub.core.errors import ValidationFailedError
from fisiohub.core.security import BCRYPT_MAX_BYTES

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

SLUG_PATTERN = r"^[a-z0-9-]{3,50}$"


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(to_utc)]


def check_password_bytes(value: str) -> str:
    """bcrypt only reads the first 72 bytes; longer passwords are refused."""
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=1), AfterValidator(check_password_bytes)]


class RequestModel(BaseModel):
    """Base for request bodies: unknown fields (tenant_id included) are rejected."""

    class Config:
        """Pydantic config."""

        extra = "forbid"
        str_strip_whitespace = True


class ResponseModel(BaseModel):
    """Base for responses built from ORM objects."""

    class Config:
        """Pydantic config."""

        from_attributes = True


class Pagination(BaseModel):
    """Pagination metadata."""

    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total number of matching records")
    total_pages: int = Field(..., description="Number of pages")


class Page(BaseModel, Generic[T]):
    """Paginated list response."""

    data: list[T]
    pagination: Pagination


class PageParams:
    """Query parameters ``page`` and ``limit`` shared by list endpoints."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number"),
        limit: int = Query(10, ge=1, le=100, description="Items per page"),
    ) -> None:
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def build(self, items: Sequence[Any], total: int, schema: type[M]) -> Page[M]:
        """Wrap one page of ORM records, rendered through ``schema``."""
        return Page[schema](  # type: ignore[valid-type]
            data=[schema.model_validate(item) for item in items],
            pagination=Pagination(
                page=self.page,
                limit=self.limit,
                total=total,
                total_pages=math.ceil(total / self.limit) if total else 0,
            ),
        )


def patch_values(data: BaseModel, required: Sequence[str] = ()) -> dict[str, Any]:
    """
    Fields explicitly sent in a PATCH body.

    An explicit null is kept (it clears the column), except on ``required``
    fields, which cannot be cleared.

    Raises:
        ValidationFailedError: If a ``required`` field is sent as null
    """
    changes = data.model_dump(exclude_unset=True)
    cleared = [name for name in required if name in changes and changes[name] is None]
    if cleared:
        raise ValidationFailedError(
            errors=[
                {"loc": ["body", name], "msg": "Field cannot be null", "type": "null_not_allowed"}
                for name in cleared
            ]
        )
    return changes
