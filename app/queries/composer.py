"""SQL templates for the four report shapes.

Each function combines a ``Predicate`` with a fixed join / aggregation
template and returns ``ComposedQuery`` objects carrying positional parameters.
The SQL targets MySQL (``DATE_FORMAT``, ``WEEKDAY``, ``CONCAT``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.filters.movement import Granularity, MovementFilter, OptionKind
from app.queries.predicates import Predicate, build_predicate

TOP_N = 15
OPTIONS_LIMIT = 100

MAGNITUDE = "COALESCE(SUM(ABS(m.Cantidad)), 0)"
CLIENT_PRESENT = "m.ClienteDWH IS NOT NULL AND m.ClienteDWH > 0"

FACT_JOINS = """
    FROM FACT_Movimientos m
    JOIN DIM_Fecha f ON m.FechaDWH = f.FechaDWH
    JOIN DIM_Proveedor p ON m.ProveedorDWH = p.ProveedorDWH
    JOIN DIM_TipoTransaccion t ON m.TipoTransaccionDWH = t.TipoTransaccionDWH"""

# Movements without a provider or type still count towards the timeline
TIMELINE_JOINS = """
    FROM FACT_Movimientos m
    JOIN DIM_Fecha f ON m.FechaDWH = f.FechaDWH
    LEFT JOIN DIM_Proveedor p ON m.ProveedorDWH = p.ProveedorDWH
    LEFT JOIN DIM_TipoTransaccion t ON m.TipoTransaccionDWH = t.TipoTransaccionDWH"""

BUCKET_EXPRESSIONS = {
    Granularity.DAY: "DATE(f.Fecha)",
    Granularity.WEEK: "DATE_SUB(f.Fecha, INTERVAL WEEKDAY(f.Fecha) DAY)",
    Granularity.MONTH: "DATE_FORMAT(f.Fecha, '%Y-%m-01')",
}


@dataclass(frozen=True)
class ComposedQuery:
    """A SQL statement with ``?`` placeholders and its ordered parameters."""

    sql: str
    params: tuple[Any, ...] = ()

    @property
    def placeholder_count(self) -> int:
        return self.sql.count("?")


@dataclass(frozen=True)
class DetailQueries:
    rows: ComposedQuery
    count: ComposedQuery


@dataclass(frozen=True)
class SummaryQueries:
    kpis: ComposedQuery
    top_providers: ComposedQuery
    top_clients: ComposedQuery
    transaction_types: ComposedQuery


def _predicate(filters: MovementFilter, predicate: Predicate | None) -> Predicate:
    return predicate if predicate is not None else build_predicate(filters)


def compose_detail(
    filters: MovementFilter, predicate: Predicate | None = None
) -> DetailQueries:
    """Paginated movement rows plus the matching total count."""
    predicate = _predicate(filters, predicate)
    where = predicate.where()

    rows_sql = f"""
    SELECT
        f.Fecha,
        COALESCE(m.ClienteDWH, 0) AS ClienteID,
        CONCAT('Cliente ', COALESCE(m.ClienteDWH, 0)) AS ClienteNombre,
        p.NombreProveedor AS ProveedorNombre,
        t.NombreTipoTransaccion AS TipoTransaccion,
        m.Cantidad,
        m.ProductoDWH,
        m.FacturaID
    {FACT_JOINS}
    {where}
    ORDER BY f.Fecha DESC
    LIMIT ? OFFSET ?
    """
    count_sql = f"""
    SELECT COUNT(*) AS total
    {FACT_JOINS}
    {where}
    """
    return DetailQueries(
        rows=ComposedQuery(rows_sql, (*predicate.params, filters.limit, filters.offset)),
        count=ComposedQuery(count_sql, predicate.params),
    )


def compose_summary(
    filters: MovementFilter,
    predicate: Predicate | None = None,
    *,
    top_n: int = TOP_N,
) -> SummaryQueries:
    """KPI totals and the three breakdowns sharing one predicate."""
    predicate = _predicate(filters, predicate)
    where = predicate.where()
    params = predicate.params

    kpis_sql = f"""
    SELECT
        COUNT(*) AS totalRegistros,
        {MAGNITUDE} AS totalMovimientos,
        COUNT(DISTINCT CASE WHEN {CLIENT_PRESENT} THEN m.ClienteDWH END) AS clientesActivos,
        COUNT(DISTINCT m.ProveedorDWH) AS proveedoresActivos
    {FACT_JOINS}
    {where}
    """
    top_providers_sql = f"""
    SELECT
        p.NombreProveedor AS nombre,
        {MAGNITUDE} AS total
    {FACT_JOINS}
    {where}
    GROUP BY p.ProveedorDWH, p.NombreProveedor
    ORDER BY total DESC, p.NombreProveedor
    LIMIT {int(top_n)}
    """
    # Unknown (null / 0) clients are excluded whether or not a client filter is set
    top_clients_sql = f"""
    SELECT
        m.ClienteDWH AS clienteId,
        CONCAT('Cliente ', m.ClienteDWH) AS nombre,
        {MAGNITUDE} AS total
    {FACT_JOINS}
    {predicate.where(CLIENT_PRESENT)}
    GROUP BY m.ClienteDWH
    HAVING total > 0
    ORDER BY total DESC, m.ClienteDWH
    LIMIT {int(top_n)}
    """
    types_sql = f"""
    SELECT
        t.NombreTipoTransaccion AS tipo,
        {MAGNITUDE} AS total
    {FACT_JOINS}
    {where}
    GROUP BY t.TipoTransaccionDWH, t.NombreTipoTransaccion
    ORDER BY total DESC, t.NombreTipoTransaccion
    """
    return SummaryQueries(
        kpis=ComposedQuery(kpis_sql, params),
        top_providers=ComposedQuery(top_providers_sql, params),
        top_clients=ComposedQuery(top_clients_sql, params),
        transaction_types=ComposedQuery(types_sql, params),
    )


def bucket_expression(granularity: Granularity) -> str:
    return BUCKET_EXPRESSIONS.get(granularity, BUCKET_EXPRESSIONS[Granularity.DAY])


def compose_timeline(
    filters: MovementFilter, predicate: Predicate | None = None
) -> ComposedQuery:
    """Magnitude per time bucket, oldest bucket first."""
    predicate = _predicate(filters, predicate)
    bucket = bucket_expression(filters.granularity)

    sql = f"""
    SELECT
        {bucket} AS fecha,
        {MAGNITUDE} AS total,
        MIN(YEAR(f.Fecha)) AS anio,
        MIN(MONTH(f.Fecha)) AS mes
    {TIMELINE_JOINS}
    {predicate.where()}
    GROUP BY {bucket}
    ORDER BY fecha
    """
    return ComposedQuery(sql, predicate.params)


def compose_options(kind: OptionKind, *, limit: int = OPTIONS_LIMIT) -> ComposedQuery:
    """Distinct values for a filter widget; no caller predicate applies."""
    limit = int(limit)
    if kind is OptionKind.PROVIDERS:
        sql = f"""
        SELECT DISTINCT p.NombreProveedor AS value, p.NombreProveedor AS label
        FROM DIM_Proveedor p
        ORDER BY p.NombreProveedor
        LIMIT {limit}
        """
    elif kind is OptionKind.TYPES:
        sql = f"""
        SELECT DISTINCT t.NombreTipoTransaccion AS value, t.NombreTipoTransaccion AS label
        FROM DIM_TipoTransaccion t
        ORDER BY t.NombreTipoTransaccion
        LIMIT {limit}
        """
    elif kind is OptionKind.CLIENTS:
        sql = f"""
        SELECT DISTINCT m.ClienteDWH AS value, CONCAT('Cliente ', m.ClienteDWH) AS label
        FROM FACT_Movimientos m
        WHERE {CLIENT_PRESENT}
        ORDER BY m.ClienteDWH
        LIMIT {limit}
        """
    else:
        raise ValueError(f"Unsupported option kind: {kind!r}")
    return ComposedQuery(sql)
