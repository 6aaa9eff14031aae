"""Service layer assembling report responses from composed queries."""

from __future__ import annotations

from app.filters.movement import MovementFilter, OptionKind
from app.queries.composer import (
    OPTIONS_LIMIT,
    TOP_N,
    compose_detail,
    compose_options,
    compose_summary,
    compose_timeline,
)
from app.repositories.movement_repository import MovementRepository
from app.schemas.common import Pagination
from app.schemas.report import (
    ClientTotal,
    Kpis,
    MovementListResponse,
    MovementRow,
    OptionItem,
    OptionsResponse,
    ProviderTotal,
    SummaryResponse,
    TimelinePoint,
    TimelineResponse,
    TransactionTypeTotal,
)
from app.utils.logging import get_logger
from app.utils.numbers import normalize_number

logger = get_logger(__name__)


class ReportService:
    """Runs report queries and shapes their rows into response schemas."""

    def __init__(
        self,
        repo: MovementRepository,
        *,
        top_n: int = TOP_N,
        options_limit: int = OPTIONS_LIMIT,
    ) -> None:
        self.repo = repo
        self.top_n = top_n
        self.options_limit = options_limit

    async def list_movements(self, filters: MovementFilter) -> MovementListResponse:
        """Paginated detail rows, newest first."""
        queries = compose_detail(filters)
        rows = await self.repo.fetch_all(queries.rows)
        count_row = await self.repo.fetch_one(queries.count) or {}
        total = int(normalize_number(count_row.get("total")))

        data = [
            MovementRow.model_validate({**row, "Cantidad": normalize_number(row.get("Cantidad"))})
            for row in rows
        ]
        return MovementListResponse(
            data=data,
            pagination=Pagination.paginate(
                total=total,
                limit=filters.limit,
                offset=filters.offset,
                returned=len(data),
            ),
        )

    async def summarize(self, filters: MovementFilter) -> SummaryResponse:
        """KPIs and breakdowns; any failing query fails the whole summary."""
        queries = compose_summary(filters, top_n=self.top_n)

        kpi_row = await self.repo.fetch_one(queries.kpis) or {}
        providers = await self.repo.fetch_all(queries.top_providers)
        clients = await self.repo.fetch_all(queries.top_clients)
        types = await self.repo.fetch_all(queries.transaction_types)

        return SummaryResponse(
            kpis=Kpis(
                total_registros=int(normalize_number(kpi_row.get("totalRegistros"))),
                total_movimientos=normalize_number(kpi_row.get("totalMovimientos")),
                clientes_activos=int(normalize_number(kpi_row.get("clientesActivos"))),
                proveedores_activos=int(normalize_number(kpi_row.get("proveedoresActivos"))),
            ),
            top_proveedores=[
                ProviderTotal(nombre=row.get("nombre"), total=normalize_number(row.get("total")))
                for row in providers
            ],
            top_clientes=[
                ClientTotal(
                    cliente_id=int(row["clienteId"]),
                    nombre=row.get("nombre") or f"Cliente {row['clienteId']}",
                    total=normalize_number(row.get("total")),
                )
                for row in clients
            ],
            tipos_transaccion=[
                TransactionTypeTotal(tipo=row.get("tipo"), total=normalize_number(row.get("total")))
                for row in types
            ],
        )

    async def timeline(self, filters: MovementFilter) -> TimelineResponse:
        """Magnitude per day, week or month bucket."""
        query = compose_timeline(filters)
        rows = await self.repo.fetch_all(query)
        logger.debug(
            "Timeline granularity=%s buckets=%d", filters.granularity.value, len(rows)
        )
        return TimelineResponse(
            data=[
                TimelinePoint(
                    fecha=row["fecha"],
                    total=normalize_number(row.get("total")),
                    anio=int(normalize_number(row.get("anio"))),
                    mes=int(normalize_number(row.get("mes"))),
                )
                for row in rows
            ],
            granularity=filters.granularity.value,
        )

    async def options(self, kind: OptionKind) -> OptionsResponse:
        """Distinct values for a filter widget.

        Dimension names may be NULL; such rows pass through as null items.
        """
        rows = await self.repo.fetch_all(compose_options(kind, limit=self.options_limit))
        return OptionsResponse(
            data=[OptionItem(value=row.get("value"), label=row.get("label")) for row in rows]
        )
