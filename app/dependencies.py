"""Engine construction and FastAPI dependency providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import Settings, get_settings
from app.filters.movement import MovementFilter
from app.repositories.movement_repository import MovementRepository
from app.services.report_service import ReportService


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the bounded connection pool for the warehouse."""
    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
        echo=settings.debug,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; reads only, so nothing is committed."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_movement_repo(db: DBSession) -> MovementRepository:
    return MovementRepository(db)


MovementRepo = Annotated[MovementRepository, Depends(get_movement_repo)]


def get_report_service(repo: MovementRepo) -> ReportService:
    settings = get_settings()
    return ReportService(repo, top_n=settings.top_n, options_limit=settings.options_limit)


ReportSvc = Annotated[ReportService, Depends(get_report_service)]


def get_movement_filter(
    fecha_desde: str | None = Query(None, alias="fechaDesde"),
    fecha_hasta: str | None = Query(None, alias="fechaHasta"),
    cliente: str | None = Query(None),
    proveedor: str | None = Query(None),
    tipo: str | None = Query(None),
    limit: str | None = Query(None),
    offset: str | None = Query(None),
    granularity: str | None = Query(None),
) -> MovementFilter:
    """Parse report query params; raw strings so coercion follows the filter rules."""
    return MovementFilter.from_params(
        date_from=fecha_desde,
        date_to=fecha_hasta,
        client_id=cliente,
        provider_name=proveedor,
        transaction_type=tipo,
        limit=limit if limit is not None else get_settings().default_page_size,
        offset=offset,
        granularity=granularity,
    )


Filters = Annotated[MovementFilter, Depends(get_movement_filter)]
