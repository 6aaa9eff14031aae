"""Filter model for movement report queries."""

from __future__ import annotations

import enum
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from app.exceptions import InvalidFilterError, InvalidOptionKindError

DEFAULT_LIMIT = 1000
DEFAULT_OFFSET = 0
# Largest LIMIT/OFFSET the warehouse accepts as a signed BIGINT.
MAX_ROW_BOUND = 2**63 - 1

CLIENT_SENTINELS = frozenset({"", "0", "null"})


class Granularity(str, enum.Enum):
    """Time-bucket width of a timeline."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def resolve(cls, value: Any) -> Granularity:
        """Missing means monthly buckets; anything unrecognised means daily."""
        if value is None or value == "":
            return cls.MONTH
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.DAY


class OptionKind(str, enum.Enum):
    """Option lists offered to filter widgets."""

    PROVIDERS = "providers"
    TYPES = "types"
    CLIENTS = "clients"

    @classmethod
    def from_path(cls, tipo: str) -> OptionKind:
        """Map the ``/api/options/{tipo}`` path segment to an option kind."""
        try:
            return _OPTION_PATHS[tipo]
        except KeyError:
            raise InvalidOptionKindError(tipo) from None


_OPTION_PATHS = {
    "proveedores": OptionKind.PROVIDERS,
    "tipos": OptionKind.TYPES,
    "clientes": OptionKind.CLIENTS,
}


def is_absent_client(value: Any) -> bool:
    """Return True when a client value means "no client filter".

    ``0`` is also the fact table's "unknown client" key, so filtering on it is
    never what the caller wants.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == 0
    return str(value).strip().lower() in CLIENT_SENTINELS


def _coerce_non_negative(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    text = str(value).strip()
    try:
        number = int(text)
    except ValueError:
        try:
            number = int(float(text))
        except (ValueError, OverflowError):
            return default
    return min(max(number, 0), MAX_ROW_BOUND)


class MovementFilter(BaseModel):
    """Normalized caller criteria shared by every report shape.

    Supported query params::

        ?fechaDesde=2024-01-01
        ?fechaHasta=2024-01-31
        ?cliente=42
        ?proveedor=contoso
        ?tipo=venta
        ?limit=100&offset=200
        ?granularity=week
    """

    model_config = ConfigDict(frozen=True)

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    client_id: Optional[int] = None
    provider_name: Optional[str] = None
    transaction_type: Optional[str] = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET
    granularity: Granularity = Granularity.MONTH

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def blank_date_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("client_id", mode="before")
    @classmethod
    def sentinel_client_is_absent(cls, v: Any) -> Any:
        if is_absent_client(v):
            return None
        if isinstance(v, str):
            v = v.strip()
            if not v.lstrip("-").isdigit():
                raise ValueError("debe ser un número entero")
            return int(v)
        return v

    @field_validator("provider_name", "transaction_type", mode="before")
    @classmethod
    def blank_text_is_absent(cls, v: Any) -> Any:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("limit", mode="before")
    @classmethod
    def coerce_limit(cls, v: Any) -> int:
        return _coerce_non_negative(v, DEFAULT_LIMIT)

    @field_validator("offset", mode="before")
    @classmethod
    def coerce_offset(cls, v: Any) -> int:
        return _coerce_non_negative(v, DEFAULT_OFFSET)

    @field_validator("granularity", mode="before")
    @classmethod
    def fallback_granularity(cls, v: Any) -> Granularity:
        return Granularity.resolve(v)

    @classmethod
    def from_params(cls, **params: Any) -> MovementFilter:
        """Build a filter from raw request values, raising ``InvalidFilterError``."""
        try:
            return cls(**params)
        except ValidationError as exc:
            raise InvalidFilterError(_first_error(exc)) from exc


_FIELD_LABELS = {
    "date_from": "fechaDesde",
    "date_to": "fechaHasta",
    "client_id": "cliente",
}


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error.get("loc") else ""
    label = _FIELD_LABELS.get(field, field)
    message = error["msg"].removeprefix("Value error, ")
    return f"Parámetro no válido '{label}': {message}"
