"""Common schemas shared across the API."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(CamelModel):
    """Base envelope for successful responses."""

    success: bool = True


class ErrorResponse(CamelModel):
    """Envelope returned for every failed request."""

    success: bool = False
    error: str


class Pagination(CamelModel):
    """Offset pagination metadata."""

    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def paginate(cls, *, total: int, limit: int, offset: int, returned: int) -> "Pagination":
        """Build pagination metadata for a page of ``returned`` rows."""
        return cls(
            total=total,
            limit=limit,
            offset=offset,
            has_more=(offset + returned) < total,
        )
