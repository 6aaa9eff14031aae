"""Repository for warehouse reads."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.queries.composer import ComposedQuery
from app.utils.logging import get_logger

logger = get_logger(__name__)


def bind_positional(query: ComposedQuery) -> tuple[str, dict[str, Any]]:
    """Rewrite ``?`` placeholders as ``:p0, :p1, ...`` for ``text()``.

    Placeholders inside single-quoted literals are left alone.
    """
    parts: list[str] = []
    binds: dict[str, Any] = {}
    in_literal = False
    index = 0
    for char in query.sql:
        if char == "'":
            in_literal = not in_literal
        elif char == "?" and not in_literal:
            if index >= len(query.params):
                raise ValueError("More placeholders than parameters in composed query")
            name = f"p{index}"
            binds[name] = query.params[index]
            parts.append(f":{name}")
            index += 1
            continue
        parts.append(char)

    if index != len(query.params):
        raise ValueError(
            f"Composed query has {index} placeholders but {len(query.params)} parameters"
        )
    return "".join(parts), binds


class MovementRepository:
    """Read-only access to the movements star schema."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def fetch_all(self, query: ComposedQuery) -> list[dict[str, Any]]:
        sql, binds = bind_positional(query)
        logger.debug("Executing report query: %s params=%s", " ".join(sql.split()), binds)
        result = await self.session.execute(text(sql), binds)
        return [dict(row) for row in result.mappings().all()]

    async def fetch_one(self, query: ComposedQuery) -> dict[str, Any] | None:
        rows = await self.fetch_all(query)
        return rows[0] if rows else None

    async def ping(self) -> bool:
        """Round-trip a trivial query; True when the database answers correctly."""
        result = await self.session.execute(text("SELECT 1+1 AS test"))
        return result.scalar() == 2
