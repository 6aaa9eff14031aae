"""WHERE-clause assembly from a ``MovementFilter``.

Every caller value is bound through a positional ``?`` placeholder; values are
never interpolated into the SQL text.

Note: ``%`` and ``_`` inside provider / transaction-type input are not escaped
and keep their LIKE wildcard meaning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.filters.movement import MovementFilter

DATE_COLUMN = "f.Fecha"
CLIENT_COLUMN = "m.ClienteDWH"
PROVIDER_COLUMN = "p.NombreProveedor"
TRANSACTION_TYPE_COLUMN = "t.NombreTipoTransaccion"


@dataclass(frozen=True)
class Predicate:
    """Ordered ``(fragment, parameter)`` pairs joined with AND."""

    fragments: tuple[str, ...] = ()
    params: tuple[Any, ...] = ()

    @property
    def clause(self) -> str:
        return " AND ".join(self.fragments)

    def __bool__(self) -> bool:
        return bool(self.fragments)

    def where(self, *extra: str) -> str:
        """Render a WHERE clause, ANDing any fixed parameterless conditions."""
        conditions = [*self.fragments, *extra]
        if not conditions:
            return ""
        return "WHERE " + " AND ".join(conditions)


@dataclass
class PredicateBuilder:
    """Accumulates predicate fragments with their bound parameters."""

    _fragments: list[str] = field(default_factory=list)
    _params: list[Any] = field(default_factory=list)

    def add(self, fragment: str, value: Any) -> PredicateBuilder:
        if fragment.count("?") != 1:
            raise ValueError(f"Fragment must hold exactly one placeholder: {fragment!r}")
        self._fragments.append(fragment)
        self._params.append(value)
        return self

    def contains(self, column: str, value: str) -> PredicateBuilder:
        return self.add(f"{column} LIKE ?", f"%{value}%")

    def build(self) -> Predicate:
        return Predicate(tuple(self._fragments), tuple(self._params))

    @classmethod
    def from_filter(cls, filters: MovementFilter) -> Predicate:
        builder = cls()
        if filters.date_from is not None:
            builder.add(f"{DATE_COLUMN} >= ?", filters.date_from)
        if filters.date_to is not None:
            builder.add(f"{DATE_COLUMN} <= ?", filters.date_to)
        if filters.client_id is not None:
            builder.add(f"{CLIENT_COLUMN} = ?", filters.client_id)
        if filters.provider_name:
            builder.contains(PROVIDER_COLUMN, filters.provider_name)
        if filters.transaction_type:
            builder.contains(TRANSACTION_TYPE_COLUMN, filters.transaction_type)
        return builder.build()


def build_predicate(filters: MovementFilter) -> Predicate:
    """Translate a filter into its predicate."""
    return PredicateBuilder.from_filter(filters)
