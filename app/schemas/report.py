"""Pydantic schemas for report responses."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import CamelModel, Pagination, SuccessResponse

Number = int | float


class MovementRow(BaseModel):
    """One movement joined to its dimensions, keyed as the warehouse names them."""

    model_config = ConfigDict(populate_by_name=True)

    fecha: date | datetime | None = Field(default=None, alias="Fecha")
    cliente_id: int = Field(default=0, alias="ClienteID")
    cliente_nombre: str = Field(default="Cliente 0", alias="ClienteNombre")
    proveedor_nombre: str | None = Field(default=None, alias="ProveedorNombre")
    tipo_transaccion: str | None = Field(default=None, alias="TipoTransaccion")
    cantidad: Number = Field(default=0, alias="Cantidad")
    producto_dwh: int | str | None = Field(default=None, alias="ProductoDWH")
    factura_id: int | str | None = Field(default=None, alias="FacturaID")


class MovementListResponse(SuccessResponse):
    """Paginated movement detail."""

    data: list[MovementRow]
    pagination: Pagination


class Kpis(CamelModel):
    total_registros: int = 0
    total_movimientos: Number = 0
    clientes_activos: int = 0
    proveedores_activos: int = 0


class ProviderTotal(CamelModel):
    nombre: str | None
    total: Number = 0


class ClientTotal(CamelModel):
    cliente_id: int
    nombre: str
    total: Number = 0


class TransactionTypeTotal(CamelModel):
    tipo: str | None
    total: Number = 0


class SummaryResponse(SuccessResponse):
    """KPIs plus provider, client and transaction-type breakdowns."""

    kpis: Kpis
    top_proveedores: list[ProviderTotal]
    top_clientes: list[ClientTotal]
    tipos_transaccion: list[TransactionTypeTotal]


class TimelinePoint(CamelModel):
    fecha: date
    total: Number = 0
    anio: int
    mes: int


class TimelineResponse(SuccessResponse):
    data: list[TimelinePoint]
    granularity: str


class OptionItem(CamelModel):
    value: int | str | None = None
    label: str | None = None


class OptionsResponse(SuccessResponse):
    data: list[OptionItem]


class HealthResponse(BaseModel):
    status: str
    database: str
    timestamp: datetime
