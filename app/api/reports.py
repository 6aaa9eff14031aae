"""Report API endpoints."""

from fastapi import APIRouter

from app.dependencies import Filters, ReportSvc
from app.filters.movement import OptionKind
from app.schemas.common import ErrorResponse
from app.schemas.report import (
    MovementListResponse,
    OptionsResponse,
    SummaryResponse,
    TimelineResponse,
)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.get("/movimientos", response_model=MovementListResponse)
async def list_movements(filters: Filters, service: ReportSvc) -> MovementListResponse:
    """Movement detail rows, newest first, with offset pagination."""
    return await service.list_movements(filters)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(filters: Filters, service: ReportSvc) -> SummaryResponse:
    """KPIs, top providers, top clients and transaction-type distribution."""
    return await service.summarize(filters)


@router.get("/timeline", response_model=TimelineResponse)
async def get_timeline(filters: Filters, service: ReportSvc) -> TimelineResponse:
    """Total movement magnitude per day, week or month.

    ``granularity`` in the response is the bucket width actually used: a
    missing value means ``month`` and an unrecognised one (``year``) is
    reported as ``day``.
    """
    return await service.timeline(filters)


@router.get("/options/{tipo}", response_model=OptionsResponse)
async def get_options(tipo: str, service: ReportSvc) -> OptionsResponse:
    """Values for the provider, transaction-type or client filter widgets."""
    return await service.options(OptionKind.from_path(tipo))
