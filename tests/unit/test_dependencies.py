"""Unit tests for dependency injection utilities."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.config import Settings
from app.dependencies import (
    create_engine,
    get_db_session,
    get_movement_filter,
    get_movement_repo,
    get_report_service,
)
from app.exceptions import InvalidFilterError
from app.filters.movement import Granularity
from app.repositories.movement_repository import MovementRepository
from app.services.report_service import ReportService


def _make_mock_request():
    """Create a mock request with a session factory on app.state."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()

    class _ContextManager:
        async def __aenter__(self):
            return session

        async def __aexit__(self, *args):
            pass

    factory = MagicMock()
    factory.return_value = _ContextManager()

    request = MagicMock()
    request.app.state.session_factory = factory

    return request, session


@pytest.mark.asyncio
class TestGetDbSession:
    async def test_closes_without_commit(self):
        """Reads never commit; the session is closed after the request."""
        request, session = _make_mock_request()

        gen = get_db_session(request)
        yielded_session = await gen.__anext__()

        assert yielded_session is session

        try:
            await gen.__anext__()
        except StopAsyncIteration:
            pass

        session.commit.assert_not_awaited()
        session.rollback.assert_not_awaited()
        session.close.assert_awaited_once()

    async def test_rolls_back_on_exception(self):
        """Session should be rolled back when the request handler raises."""
        request, session = _make_mock_request()

        gen = get_db_session(request)
        await gen.__anext__()

        with pytest.raises(ValueError):
            await gen.athrow(ValueError("test error"))

        session.rollback.assert_awaited_once()
        session.close.assert_awaited_once()


class TestProviders:
    def test_repo_wraps_session(self):
        session = MagicMock()
        repo = get_movement_repo(session)
        assert isinstance(repo, MovementRepository)
        assert repo.session is session

    def test_service_uses_settings(self):
        repo = MagicMock()
        with patch(
            "app.dependencies.get_settings",
            return_value=Settings(top_n=7, options_limit=30),
        ):
            service = get_report_service(repo)
        assert isinstance(service, ReportService)
        assert service.repo is repo
        assert service.top_n == 7
        assert service.options_limit == 30


class TestGetMovementFilter:
    def test_maps_query_params(self):
        f = get_movement_filter(
            fecha_desde="2024-01-01",
            fecha_hasta="2024-01-31",
            cliente="null",
            proveedor="contoso",
            tipo="venta",
            limit="50",
            offset="100",
            granularity="week",
        )
        assert str(f.date_from) == "2024-01-01"
        assert f.client_id is None
        assert f.provider_name == "contoso"
        assert f.transaction_type == "venta"
        assert f.limit == 50
        assert f.offset == 100
        assert f.granularity is Granularity.WEEK

    def test_default_limit_comes_from_settings(self):
        with patch(
            "app.dependencies.get_settings",
            return_value=Settings(default_page_size=250),
        ):
            f = get_movement_filter(
                fecha_desde=None,
                fecha_hasta=None,
                cliente=None,
                proveedor=None,
                tipo=None,
                limit=None,
                offset=None,
                granularity=None,
            )
        assert f.limit == 250
        assert f.offset == 0
        assert f.granularity is Granularity.MONTH

    def test_bad_date_raises(self):
        with pytest.raises(InvalidFilterError):
            get_movement_filter(
                fecha_desde="31/01/2024",
                fecha_hasta=None,
                cliente=None,
                proveedor=None,
                tipo=None,
                limit=None,
                offset=None,
                granularity=None,
            )


class TestCreateEngine:
    def test_pool_settings_are_applied(self):
        settings = Settings(db_pool_size=4, db_max_overflow=2, db_pool_timeout=15)
        with patch("app.dependencies.create_async_engine") as factory:
            create_engine(settings)
        _, kwargs = factory.call_args
        assert kwargs["pool_size"] == 4
        assert kwargs["max_overflow"] == 2
        assert kwargs["pool_timeout"] == 15
        assert factory.call_args.args[0] == settings.database_url


class TestSettings:
    def test_plain_mysql_url_gets_async_driver(self):
        s = Settings(database_url="mysql://u:p@db:3306/wwi")
        assert s.database_url == "mysql+aiomysql://u:p@db:3306/wwi"

    def test_async_url_untouched(self):
        s = Settings(database_url="mysql+aiomysql://u:p@db:3306/wwi")
        assert s.database_url == "mysql+aiomysql://u:p@db:3306/wwi"
